"""Compile link schemas into jsonschema validators and emit their registration code.

build_validator() is the only entry point the parser uses; the generated
validator module is written by ValidatorGenerator.process().
"""

from __future__ import annotations

import copy
import pprint
import re
from dataclasses import dataclass
from typing import Any, Iterable, TextIO

import jsonschema
from jsonschema.exceptions import SchemaError as JSONSchemaError

from .errors import SchemaError, UnresolvableReferenceError
from .hyperschema import resolve_ref
from .naming import render_imports

# Draft number in a $schema URI -> jsonschema validator class name
_DRAFTS: dict[str, str] = {
    "3": "Draft3Validator",
    "4": "Draft4Validator",
    "6": "Draft6Validator",
    "7": "Draft7Validator",
    "2019-09": "Draft201909Validator",
    "2020-12": "Draft202012Validator",
}

# Links-array hyper-schemas are draft 4
DEFAULT_VALIDATOR = "Draft4Validator"

_DRAFT_RX = re.compile(r"draft[-/]0?(\d{4}-\d{2}|\d+)")


def validator_class_name(root: dict[str, Any]) -> str:
    """Pick the jsonschema validator class for the document's $schema."""
    uri = root.get("$schema")
    if not isinstance(uri, str):
        return DEFAULT_VALIDATOR
    match = _DRAFT_RX.search(uri)
    if not match:
        return DEFAULT_VALIDATOR
    return _DRAFTS.get(match.group(1), DEFAULT_VALIDATOR)


@dataclass(frozen=True)
class ValidatorHandle:
    """A compiled, self-contained validation schema for one payload."""

    name: str
    schema: dict[str, Any]
    validator_class: str = DEFAULT_VALIDATOR

    def validate(self, payload: Any) -> None:
        """Raise jsonschema.ValidationError when payload doesn't match."""
        cls = getattr(jsonschema, self.validator_class)
        cls(self.schema).validate(payload)


class _Dereferencer:
    """Inline $refs; recursive ones stay and their root sections get embedded."""

    def __init__(self, root: dict[str, Any]):
        self.root = root
        self.embedded: set[str] = set()

    def walk(self, node: Any, stack: tuple[str, ...]) -> Any:
        if isinstance(node, list):
            return [self.walk(item, stack) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str):
            if ref in stack:
                self._embed(ref)
                return {"$ref": ref}
            return self.walk(resolve_ref(self.root, ref), stack + (ref,))

        return {key: self.walk(value, stack) for key, value in node.items()}

    def _embed(self, ref: str) -> None:
        section = ref[1:].lstrip("/").split("/", 1)[0]
        if not section:
            raise UnresolvableReferenceError(f"recursive reference {ref!r} to the document root")
        self.embedded.add(section)


def dereference(schema: dict[str, Any], root: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of schema that validates without the root document."""
    deref = _Dereferencer(root)
    result = deref.walk(schema, ())
    for section in sorted(deref.embedded):
        if section in result and result[section] != root[section]:
            raise UnresolvableReferenceError(
                f"cannot embed {section!r} for a recursive reference: the schema defines its own"
            )
        result[section] = copy.deepcopy(root[section])
    return result


def build_validator(schema: dict[str, Any], root: dict[str, Any], name: str) -> ValidatorHandle:
    """Build the validator handle for a (resolved) link schema."""
    resolved = dereference(schema, root)
    class_name = validator_class_name(root)
    try:
        getattr(jsonschema, class_name).check_schema(resolved)
    except JSONSchemaError as e:
        raise SchemaError(f"{name}: invalid schema: {e.message}") from e
    return ValidatorHandle(name=name, schema=resolved, validator_class=class_name)


class ValidatorGenerator:
    """Write a module registering each validator as a module-level instance."""

    def __init__(self, imports: Iterable[str] = ()):
        self.imports = tuple(imports)

    def process(self, out: TextIO, validators: Iterable[ValidatorHandle]) -> None:
        validators = sorted(validators, key=lambda v: v.name)
        classes = sorted({v.validator_class for v in validators})

        thirdparty = [f"from jsonschema import {', '.join(classes)}"] if classes else []
        out.write(render_imports([], thirdparty + list(self.imports)))
        out.write("\n")
        out.write(f"__all__ = {[v.name for v in validators]!r}\n")

        for v in validators:
            literal = pprint.pformat(v.schema, indent=4, width=88, sort_dicts=True)
            out.write(f"\n{v.name} = {v.validator_class}(\n{literal}\n)\n")
