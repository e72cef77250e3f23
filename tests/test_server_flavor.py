"""Tests for the server flavor: handler IR, routes and rendered sources."""

import ast
import io

import pytest
from schemas import make_link

from hsgen.codegen import SYSTEM, USER
from hsgen.config import Options
from hsgen.errors import MultiTypePropertyError, SchemaError
from hsgen.flavors.server import (
    QueryParam,
    ServerFlavor,
    build_routes,
    mutator_names,
    sample_payload,
    sample_value,
    struct_types,
    wrapper_names,
)

DRAFT_07 = "http://json-schema.org/draft-07/schema#"

QUERY_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "integer"},
        "price": {"type": "number"},
        "active": {"type": ["boolean"]},
        "tags": {"type": "array", "items": {"type": "string"}},
        "ids": {"type": "array", "items": {"type": "integer"}},
        "filter": {"type": "object"},
        "q": {},
    },
}


def render(renderer, result):
    out = io.StringIO()
    renderer(result, out)
    return out.getvalue()


@pytest.fixture
def server(options):
    return ServerFlavor(options)


class TestRoutes:
    def test_sorted_by_path(self, server, petstore):
        routes = build_routes(server.parse(petstore))
        assert [r.path for r in routes] == ["/item", "/items", "/items/list"]

    def test_plain_handler(self, server, petstore):
        routes = build_routes(server.parse(petstore))
        assert routes[0].expression == "http_get_item"

    def test_first_wrapper_is_outermost(self, server, petstore):
        routes = build_routes(server.parse(petstore))
        assert routes[1].expression == "auth(log(http_create_item))"

    def test_middlewares_wrap_everything(self, server, hyperschema):
        link = make_link("ping", "/ping", pywrapper="auth")
        result = server.parse(hyperschema([link], pymiddlewares=["cors", "trace"]))
        assert build_routes(result)[0].expression == "cors(trace(auth(http_ping)))"

    def test_duplicate_path_registered_once(self, server, hyperschema):
        links = [make_link("get item", "/item"), make_link("fetch item", "/item")]
        text = render(server.render_routes, server.parse(hyperschema(links)))
        assert text.count("self.handle(") == 1
        assert "http_fetch_item)" in text


class TestQueryBinding:
    """Test how form-bound properties are parsed."""

    def _handler(self, server, hyperschema, schema):
        result = server.parse(hyperschema([make_link("search", "/search", schema=schema)]))
        return result.methods["Search"]

    def test_integer(self, server, petstore):
        code = server.parse(petstore).methods["GetItem"]
        assert "get_integer(form, 'id')" in code
        assert "'Invalid parameter id'" in code
        assert "payload['id'] = values[0]" in code

    def test_kinds(self, server, hyperschema):
        code = self._handler(server, hyperschema, QUERY_SCHEMA)
        assert "get_number(form, 'price')" in code
        assert "get_boolean(form, 'active')" in code
        assert "get_string(form, 'tags')" in code
        assert "payload['tags'] = values\n" in code
        assert "get_integer(form, 'ids')" in code

    def test_unsupported_kinds_are_strings(self, server, hyperschema):
        code = self._handler(server, hyperschema, QUERY_SCHEMA)
        assert "get_string(form, 'filter')" in code
        assert "get_string(form, 'q')" in code

    def test_multi_type(self, server, hyperschema):
        schema = {"type": "object", "properties": {"id": {"type": ["integer", "string"]}}}
        with pytest.raises(MultiTypePropertyError, match="Search.id"):
            self._handler(server, hyperschema, schema)

    def test_query_param_getter(self):
        assert QueryParam("id", "integer").getter == "get_integer"

    def test_true_schema_is_a_string(self, server, hyperschema):
        schema = {"type": "object", "properties": {"flag": True}}
        result = server.parse(hyperschema([make_link("search", "/search", schema=schema)], **{"$schema": DRAFT_07}))
        assert "get_string(form, 'flag')" in result.methods["Search"]

    def test_false_schema_rejected(self, server, hyperschema):
        schema = {"type": "object", "properties": {"flag": False}}
        with pytest.raises(SchemaError, match="Search.flag: property schema false"):
            server.parse(hyperschema([make_link("search", "/search", schema=schema)], **{"$schema": DRAFT_07}))


class TestHandlerCode:
    def test_verb_check(self, server, petstore):
        code = server.parse(petstore).methods["CreateItem"]
        assert "if request.method != 'post':" in code

    def test_json_binding(self, server, petstore):
        code = server.parse(petstore).methods["CreateItem"]
        assert "payload = request.json()" in code
        assert "validator.HTTPCreateItemRequest.validate(payload)" in code
        assert "handlers.do_create_item(ctx, response, request, payload)" in code

    def test_no_payload(self, server, petstore):
        code = server.parse(petstore).methods["ListItems"]
        assert "payload" not in code
        assert "handlers.do_list_items(ctx, response, request)" in code

    def test_cors(self, server, hyperschema):
        link = make_link("ping", "/ping", pycors="https://example.com")
        code = server.parse(hyperschema([link])).methods["Ping"]
        assert "response.headers[\"Access-Control-Allow-Origin\"] = 'https://example.com'" in code
        assert "'GET, OPTIONS'" in code

    def test_mutators_before_validation(self, server, hyperschema):
        schema = {"type": "object"}
        link = make_link("create item", "/items", "POST", schema=schema, pymutators=["trim", "lower"])
        code = server.parse(hyperschema([link])).methods["CreateItem"]
        assert code.index("payload = trim(payload)") < code.index("payload = lower(payload)")
        assert code.index("payload = lower(payload)") < code.index(".validate(payload)")

    def test_multipart(self, server, hyperschema):
        link = make_link("upload", "/upload", "POST", schema={"type": "object"}, pymultipart="avatar")
        code = server.parse(hyperschema([link])).methods["Upload"]
        assert "payload, files = request.multipart()" in code
        assert code.index(".validate(payload)") < code.index("payload.update(files)")

    def test_struct_payload(self, server, hyperschema):
        link = make_link("create item", "/items", "POST", schema={"$ref": "#/definitions/item"})
        code = server.parse(hyperschema([link])).methods["CreateItem"]
        assert "payload = Item(payload)" in code

    def test_custom_validator_module(self, options, petstore):
        server = ServerFlavor(Options(output_dir=options.output_dir, app_pkg="shop", validator_pkg="schemas"))
        code = server.parse(petstore).methods["GetItem"]
        assert "schemas.HTTPGetItemRequest.validate(payload)" in code


class TestNames:
    def test_wrappers(self, server, hyperschema):
        links = [
            make_link("a", "/a", pywrapper=["auth", "pkg.trace"]),
            make_link("b", "/b", pywrapper="log", pymutators=["trim", "auth"]),
        ]
        result = server.parse(hyperschema(links, pymiddlewares="cors"))
        assert wrapper_names(result) == ["auth", "cors", "log"]
        assert mutator_names(result) == ["trim"]

    def test_struct_types(self, server, petstore):
        result = server.parse(petstore)
        assert struct_types(result.request_payload_type) == []
        assert struct_types(result.request_payload_type, result.response_payload_type) == ["Item"]


class TestArtifacts:
    def test_files(self, server, petstore):
        artifacts = server.artifacts(server.parse(petstore))
        files = {str(a.path): a.owner for a in artifacts}
        assert files == {
            "shop/server.py": SYSTEM,
            "shop/validator.py": SYSTEM,
            "shop/__init__.py": USER,
            "shop/handlers.py": USER,
            "shop/models.py": USER,
            "shop/__main__.py": USER,
            "tests/test_shop.py": USER,
        }

    def test_every_file_parses(self, server, petstore):
        result = server.parse(petstore)
        for artifact in server.artifacts(result):
            out = io.StringIO()
            artifact.render(out)
            ast.parse(out.getvalue(), filename=str(artifact.path))


class TestRenderedFiles:
    """Test the contents of rendered server files."""

    def test_server_imports(self, server, petstore):
        text = render(server.render_routes, server.parse(petstore))
        assert text.startswith("# DO NOT EDIT.")
        assert "import jsonschema\n" in text
        assert "from . import handlers, validator\n" in text
        assert "from .handlers import auth, log\n" in text
        assert "from .models" not in text

    def test_strict_integers(self, server, petstore):
        text = render(server.render_routes, server.parse(petstore))
        assert "import re\n" in text
        assert '_INTEGER = re.compile(r"[+-]?[0-9]+")' in text
        assert "if not _INTEGER.fullmatch(v):" in text

    def test_server_hint_imports(self, server, hyperschema):
        schema = hyperschema([make_link("ping", "/ping")], **{"hsgen.server": {"imports": ["shop_ext"]}})
        text = render(server.render_routes, server.parse(schema))
        assert "import shop_ext\n" in text

    def test_empty_route_table(self, server, hyperschema):
        text = render(server.render_routes, server.parse(hyperschema([])))
        ast.parse(text)
        assert "self.handle(" not in text

    def test_handlers(self, server, petstore):
        text = render(server.render_handlers, server.parse(petstore))
        assert "def auth(handler: Handler) -> Handler:" in text
        assert "def log(handler: Handler) -> Handler:" in text
        assert (
            "def do_get_item(ctx: dict[str, Any], response: Response, request: Request, "
            "payload: dict[str, Any]) -> None:"
        ) in text
        assert "def do_list_items(ctx: dict[str, Any], response: Response, request: Request) -> None:" in text

    def test_models(self, server, petstore):
        text = render(server.render_models, server.parse(petstore))
        assert "class Item(dict):" in text
        assert "class Any" not in text

    def test_tests(self, server, petstore):
        text = render(server.render_tests, server.parse(petstore))
        assert "from shop.client import Client" in text
        assert "validator.HTTPGetItemResponse.validate(result)" in text
        assert "result = client.list_items()" in text
        assert "payload = {'id': 1}" in text
        assert '@pytest.mark.xfail(reason="fill in handlers.do_get_item")' in text

    def test_tests_without_response(self, server, hyperschema):
        schema = {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]}
        text = render(server.render_tests, server.parse(hyperschema([make_link("ping", "/ping", "POST", schema=schema)])))
        assert "payload = {'name': 'x'}" in text
        assert "assert result is None" in text
        assert "xfail" not in text


class TestSamples:
    """Test the payloads written into the generated tests."""

    @pytest.mark.parametrize(
        "schema, expected",
        [
            ({"type": "integer"}, 1),
            ({"type": "number"}, 1.0),
            ({"type": ["boolean", "null"]}, True),
            ({"type": "string", "minLength": 3}, "xxx"),
            ({"type": "array", "items": {"type": "integer"}}, [1]),
            ({"enum": ["red", "blue"]}, "red"),
            ({}, "x"),
            (True, "x"),
        ],
    )
    def test_value(self, schema, expected):
        assert sample_value(schema) == expected

    def test_only_required(self):
        schema = {
            "type": "object",
            "properties": {"id": {"type": "integer"}, "tag": {"type": "object", "required": ["k"]}, "note": {}},
            "required": ["id", "tag"],
        }
        assert sample_payload(schema) == {"id": 1, "tag": {"k": "x"}}
