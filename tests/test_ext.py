"""Tests for vendor extension decoding."""

import pytest

from hsgen import ext
from hsgen.errors import ExtrasTypeError


class TestStringList:
    def test_single_string(self):
        assert ext.string_list("auth", "pywrapper", "here") == ("auth",)

    def test_list(self):
        assert ext.string_list(["auth", "log"], "pywrapper", "here") == ("auth", "log")

    def test_number(self):
        with pytest.raises(ExtrasTypeError, match="pywrapper"):
            ext.string_list(3, "pywrapper", "here")

    def test_mixed_list(self):
        with pytest.raises(ExtrasTypeError):
            ext.string_list(["auth", 3], "pywrapper", "here")


class TestTypeHint:
    def test_absent(self):
        assert ext.type_hint({"type": "object"}, "here") is None

    def test_present(self):
        assert ext.type_hint({"pytype": " Item "}, "here") == "Item"

    def test_empty(self):
        with pytest.raises(ExtrasTypeError):
            ext.type_hint({"pytype": ""}, "here")

    def test_not_a_string(self):
        with pytest.raises(ExtrasTypeError):
            ext.type_hint({"pytype": ["Item"]}, "here")


class TestLinkHints:
    """Test decoding of per-link hints."""

    def test_empty(self):
        assert ext.decode_link_hints({}, "here") == ext.LinkHints()

    def test_all(self):
        hints = ext.decode_link_hints(
            {
                "pywrapper": "auth",
                "pycors": "*",
                "pymutators": ["trim"],
                "pymultipart": ["avatar", "banner"],
            },
            "here",
        )
        assert hints.wrappers == ("auth",)
        assert hints.cors == "*"
        assert hints.mutators == ("trim",)
        assert hints.multipart == ("avatar", "banner")

    def test_cors_not_a_string(self):
        with pytest.raises(ExtrasTypeError, match="pycors"):
            ext.decode_link_hints({"pycors": ["*"]}, "here")

    def test_error_names_the_link(self):
        with pytest.raises(ExtrasTypeError, match="link 'get item'"):
            ext.decode_link_hints({"pymutators": {}}, "link 'get item'")


class TestRootHints:
    def test_middlewares(self):
        assert ext.decode_middlewares({"pymiddlewares": "cors"}) == ("cors",)

    def test_no_middlewares(self):
        assert ext.decode_middlewares({}) == ()

    def test_artifact_hints_default(self):
        hints = ext.decode_artifact_hints({})
        assert set(hints) == {"server", "client", "validator"}
        assert hints["server"].imports == ()

    def test_artifact_hints(self):
        hints = ext.decode_artifact_hints({"hsgen.client": {"imports": ["from shop import retry"]}})
        assert hints["client"].imports == ("from shop import retry",)
        assert hints["validator"].imports == ()

    def test_artifact_hints_not_an_object(self):
        with pytest.raises(ExtrasTypeError, match="hsgen.server"):
            ext.decode_artifact_hints({"hsgen.server": ["json"]})

    def test_artifact_imports_not_an_array(self):
        with pytest.raises(ExtrasTypeError, match="imports"):
            ext.decode_artifact_hints({"hsgen.server": {"imports": "json"}})
