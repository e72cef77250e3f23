"""WSGI server flavor: routes, stub handlers, data types, entry point, tests.

Each link becomes an http_<name> handler in server.py that checks the verb,
rebuilds and validates the payload, then calls handlers.do_<name>. Routes are
registered sorted by path; wrappers nest first-declared outermost.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from ..codegen import SYSTEM, USER, Artifact, render_template
from ..errors import MultiTypePropertyError, SchemaError
from ..hyperschema import Link
from ..naming import looks_like_struct, render_imports, snake_case
from ..parser import ParseState, Result
from .base import Flavor
from .validator import render_validator

logger = logging.getLogger(__name__)

# Query/form values are parsed according to the declared property type;
# anything else binds as a string
_QUERY_KINDS = {"integer", "number", "boolean", "string"}

_SERVER_STDLIB = [
    "json",
    "re",
    "from email.parser import BytesParser",
    "from email.policy import HTTP",
    "from http import HTTPStatus",
    "from typing import Any, Callable",
    "from urllib.parse import parse_qs",
    "from wsgiref.simple_server import make_server",
]


@dataclass(frozen=True)
class QueryParam:
    """One payload property bound from query (or url-encoded form) values."""

    name: str
    kind: str
    many: bool = False

    @property
    def getter(self) -> str:
        return f"get_{self.kind}"


@dataclass(frozen=True)
class Handler:
    """Everything the handler template needs for one method."""

    name: str
    function: str
    stub: str
    http_method: str
    binding: str
    params: tuple[QueryParam, ...] = ()
    payload_type: str | None = None
    struct: bool = False
    validator: str | None = None
    mutators: tuple[str, ...] = ()
    cors: str | None = None


@dataclass(frozen=True)
class Route:
    path: str
    method_name: str
    expression: str


def handler_function(name: str) -> str:
    return f"http_{snake_case(name)}"


def stub_function(name: str) -> str:
    return f"do_{snake_case(name)}"


def _single_type(prop: dict[str, Any], where: str) -> str | None:
    t = prop.get("type")
    if isinstance(t, list):
        if len(t) != 1:
            raise MultiTypePropertyError(
                f"{where}: can't handle input parameters unless the type contains exactly 1 type"
            )
        t = t[0]
    return t if isinstance(t, str) else None


def query_params(state: ParseState, name: str, schema: dict[str, Any]) -> tuple[QueryParam, ...]:
    """Work out how each property of a form-bound schema is parsed."""
    params = []
    for prop_name, prop in sorted(schema.get("properties", {}).items()):
        where = f"{name}.{prop_name}"
        if prop is True:
            params.append(QueryParam(name=prop_name, kind="string"))
            continue
        if prop is False:
            raise SchemaError(f"{where}: property schema false can never be satisfied")
        prop = state.resolve(prop)
        kind = _single_type(prop, where)
        many = kind == "array"
        if many:
            items = prop.get("items", {})
            kind = _single_type(state.resolve(items), f"{where}[]") if isinstance(items, dict) else None
        if kind not in _QUERY_KINDS:
            if kind is not None:
                logger.debug("%s: binding %s values as strings", where, kind)
            kind = "string"
        params.append(QueryParam(name=prop_name, kind=kind, many=many))
    return tuple(params)


def sample_value(schema: Any) -> Any:
    """Return a value of the schema's type, for the generated test scaffold."""
    if not isinstance(schema, dict):
        return "x"
    if schema.get("enum"):
        return schema["enum"][0]
    t = schema.get("type")
    if isinstance(t, list):
        t = t[0] if t else None
    if t == "integer":
        return 1
    if t == "number":
        return 1.0
    if t == "boolean":
        return True
    if t == "array":
        return [sample_value(schema.get("items", {}))]
    if t == "object":
        return sample_payload(schema)
    if t == "null":
        return None
    return "x" * max(1, schema.get("minLength", 1))


def sample_payload(schema: dict[str, Any]) -> dict[str, Any]:
    """Fill in every required property of an object schema."""
    properties = schema.get("properties", {})
    return {name: sample_value(properties.get(name, {})) for name in schema.get("required", [])}


def build_handler(state: ParseState, name: str, link: Link) -> Handler:
    payload_type = state.request_payload_type.get(name)
    validator = state.request_validators.get(name)

    binding = "none"
    params: tuple[QueryParam, ...] = ()
    if link.schema is not None:
        if name in state.multipart_fields:
            binding = "multipart"
        elif link.http_method == "get" or link.enc_type == "application/x-www-form-urlencoded":
            binding = "form"
            params = query_params(state, name, state.resolve(link.schema))
        else:
            binding = "json"

    return Handler(
        name=name,
        function=handler_function(name),
        stub=stub_function(name),
        http_method=link.http_method,
        binding=binding,
        params=params,
        payload_type=payload_type,
        struct=payload_type is not None and looks_like_struct(payload_type),
        validator=validator.name if validator else None,
        mutators=state.request_mutators.get(name, ()),
        cors=state.request_cors.get(name),
    )


def build_routes(result: Result) -> list[Route]:
    """Route table sorted by path, each handler wrapped in its middleware chain."""
    routes = []
    for path in sorted(result.path_to_methods):
        name = result.path_to_methods[path]
        expression = handler_function(name)
        for wrapper in reversed(result.middlewares + result.method_wrappers.get(name, ())):
            expression = f"{wrapper}({expression})"
        routes.append(Route(path=path, method_name=name, expression=expression))
    return routes


def _plain(names: list[str] | set[str]) -> list[str]:
    """Names defined in handlers.py; dotted names come from import hints."""
    return sorted(n for n in names if "." not in n)


def wrapper_names(result: Result) -> list[str]:
    names = set(result.middlewares)
    for wrappers in result.method_wrappers.values():
        names.update(wrappers)
    return _plain(names)


def mutator_names(result: Result) -> list[str]:
    names: set[str] = set()
    for mutators in result.request_mutators.values():
        names.update(mutators)
    return [n for n in _plain(names) if n not in wrapper_names(result)]


def struct_types(*tables: Any) -> list[str]:
    """Distinct placeholder-worthy type names, sorted."""
    types = set()
    for table in tables:
        types.update(t for t in table.values() if looks_like_struct(t))
    return sorted(t for t in types if "." not in t)


class ServerFlavor(Flavor):
    name = "server"

    def build_method(self, state: ParseState, name: str, link: Link) -> str:
        return render_template(
            "handler.py.j2",
            h=build_handler(state, name, link),
            validator_pkg=self.options.validator_pkg,
        )

    def artifacts(self, result: Result) -> list[Artifact]:
        opts = self.options
        app = Path(opts.app_pkg)

        def with_result(fn):
            return lambda out: fn(result, out)

        return [
            Artifact("routes", app / "server.py", SYSTEM, with_result(self.render_routes)),
            Artifact(
                "validator",
                app / f"{opts.validator_pkg}.py",
                SYSTEM,
                lambda out: render_validator(result, out, self.imports(result, "validator")),
            ),
            Artifact("package", app / "__init__.py", USER, with_result(self.render_package)),
            Artifact("handlers", app / "handlers.py", USER, with_result(self.render_handlers)),
            Artifact("models", app / "models.py", USER, with_result(self.render_models)),
            Artifact("main", app / "__main__.py", USER, with_result(self.render_main)),
            Artifact("tests", Path("tests") / f"test_{opts.app_pkg}.py", USER, with_result(self.render_tests)),
        ]

    def render_routes(self, result: Result, out: TextIO) -> None:
        local = [f"from . import handlers, {self.options.validator_pkg}"]
        imported = wrapper_names(result) + mutator_names(result)
        if imported:
            local.append(f"from .handlers import {', '.join(imported)}")
        models = struct_types(result.request_payload_type)
        if models:
            local.append(f"from .models import {', '.join(models)}")

        out.write(
            render_template(
                "server.py.j2",
                app_pkg=self.options.app_pkg,
                imports=render_imports(
                    _SERVER_STDLIB, ["jsonschema", *self.imports(result, "server")], local
                ),
                method_names=result.method_names,
                methods=result.methods,
                routes=build_routes(result),
            )
        )

    def render_handlers(self, result: Result, out: TextIO) -> None:
        stubs = [
            {
                "stub": stub_function(name),
                "payload_type": result.request_payload_type.get(name),
            }
            for name in result.method_names
        ]
        out.write(
            render_template(
                "handlers.py.j2",
                app_pkg=self.options.app_pkg,
                models=struct_types(result.request_payload_type),
                wrappers=wrapper_names(result),
                mutators=mutator_names(result),
                stubs=stubs,
            )
        )

    def render_models(self, result: Result, out: TextIO) -> None:
        out.write(
            render_template(
                "models.py.j2",
                app_pkg=self.options.app_pkg,
                types=struct_types(result.request_payload_type, result.response_payload_type),
            )
        )

    def render_main(self, result: Result, out: TextIO) -> None:
        out.write(render_template("main.py.j2", app_pkg=self.options.app_pkg))

    def render_package(self, result: Result, out: TextIO) -> None:
        out.write(render_template("package.py.j2", app_pkg=self.options.app_pkg))

    def render_tests(self, result: Result, out: TextIO) -> None:
        tests = []
        for name in result.method_names:
            request = result.request_validators.get(name)
            response = result.response_validators.get(name)
            tests.append(
                {
                    "function": snake_case(name),
                    "stub": stub_function(name),
                    "payload": sample_payload(request.schema) if request else None,
                    "request_validator": request.name if request else None,
                    "response_validator": response.name if response else None,
                }
            )
        out.write(
            render_template(
                "test_app.py.j2",
                app_pkg=self.options.app_pkg,
                validator_pkg=self.options.validator_pkg,
                client_pkg=self.options.client_pkg,
                tests=tests,
            )
        )
