"""Vendor extension keys understood by hsgen, and their typed decoding.

Schema-level:
  pytype          explicit payload type name ("Item", "list[Item]")

Link-level:
  pywrapper       wrappers around the route handler, first-declared outermost
  pycors          allowed CORS origin
  pymutators      callables applied to the payload before validation
  pymultipart     file-upload field names (makes the link multipart)

Root-level:
  pymiddlewares   wrappers applied around every route
  hsgen.server    {"imports": [...]} extra imports for server.py
  hsgen.client    {"imports": [...]} extra imports for the client module
  hsgen.validator {"imports": [...]} extra imports for the validator module

Wrapper, middleware and mutator names are plain identifiers (stubs are
generated in handlers.py) or dotted names whose module comes from imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import ExtrasTypeError

TYPE_KEY = "pytype"
WRAPPER_KEY = "pywrapper"
CORS_KEY = "pycors"
MUTATORS_KEY = "pymutators"
MULTIPART_KEY = "pymultipart"
MIDDLEWARES_KEY = "pymiddlewares"

SERVER_HINTS_KEY = "hsgen.server"
CLIENT_HINTS_KEY = "hsgen.client"
VALIDATOR_HINTS_KEY = "hsgen.validator"

# Artifact kind -> root extras key holding its hints
HINT_KEYS: dict[str, str] = {
    "server": SERVER_HINTS_KEY,
    "client": CLIENT_HINTS_KEY,
    "validator": VALIDATOR_HINTS_KEY,
}


@dataclass(frozen=True)
class LinkHints:
    """Decoded vendor hints of one link."""

    wrappers: tuple[str, ...] = ()
    cors: str | None = None
    mutators: tuple[str, ...] = ()
    multipart: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArtifactHints:
    """Decoded root-level hints for one generated artifact kind."""

    imports: tuple[str, ...] = ()


def string_list(value: Any, key: str, where: str) -> tuple[str, ...]:
    """Accept a single string or an array of strings."""
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, str):
                raise ExtrasTypeError(f"{where}: elements of {key!r} must be strings, got {item!r}")
        return tuple(value)
    raise ExtrasTypeError(f"{where}: {key!r} must be a string, or an array of strings")


def type_hint(schema: dict[str, Any], where: str) -> str | None:
    """Return the explicit payload type of a schema, if it declares one."""
    if TYPE_KEY not in schema:
        return None
    value = schema[TYPE_KEY]
    if not isinstance(value, str) or not value.strip():
        raise ExtrasTypeError(f"{where}: {TYPE_KEY!r} must be a non-empty string")
    return value.strip()


def decode_link_hints(extras: dict[str, Any], where: str) -> LinkHints:
    cors = extras.get(CORS_KEY)
    if cors is not None and not isinstance(cors, str):
        raise ExtrasTypeError(f"{where}: {CORS_KEY!r} must be a string")

    wrappers = extras.get(WRAPPER_KEY)
    mutators = extras.get(MUTATORS_KEY)
    multipart = extras.get(MULTIPART_KEY)
    return LinkHints(
        wrappers=string_list(wrappers, WRAPPER_KEY, where) if wrappers is not None else (),
        cors=cors,
        mutators=string_list(mutators, MUTATORS_KEY, where) if mutators is not None else (),
        multipart=string_list(multipart, MULTIPART_KEY, where) if multipart is not None else (),
    )


def decode_middlewares(extras: dict[str, Any]) -> tuple[str, ...]:
    value = extras.get(MIDDLEWARES_KEY)
    if value is None:
        return ()
    return string_list(value, MIDDLEWARES_KEY, "schema root")


def decode_artifact_hints(extras: dict[str, Any]) -> dict[str, ArtifactHints]:
    """Decode the hsgen.* hint maps of the root document."""
    hints: dict[str, ArtifactHints] = {}
    for kind, key in HINT_KEYS.items():
        value = extras.get(key)
        if value is None:
            hints[kind] = ArtifactHints()
            continue
        if not isinstance(value, dict):
            raise ExtrasTypeError(f"invalid value type for {key}: expected an object")
        imports = value.get("imports", [])
        if not isinstance(imports, list):
            raise ExtrasTypeError(f"invalid value type for {key} imports: expected an array")
        hints[kind] = ArtifactHints(imports=string_list(imports, "imports", key))
    return hints
