"""Derive Python identifiers from link titles and classify type names.

Pattern: title words -> PascalCase method name -> snake_case functions
  - "get item"       -> GetItem -> http_get_item / do_get_item / get_item
  - "list  pets"     -> ListPets
  - "create item-v2" -> CreateItemv2

Validators are named after the method: HTTPGetItemRequest, HTTPGetItemResponse.
"""

from __future__ import annotations

import re

from .errors import MissingTitleError, SchemaError

# Type names that never get a placeholder declaration
_BUILTIN_TYPES = {"Any", "str", "int", "float", "bool", "bytes", "None", "object"}

_CONTAINER_PREFIXES = ("list[", "dict[", "tuple[", "set[", "frozenset[", "typing.")

_DOTTED_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def _sanitize_word(word: str) -> str:
    """Drop characters that cannot appear in a Python identifier."""
    return re.sub(r"[^A-Za-z0-9_]", "", word)


def title_to_name(title: str | None) -> str:
    """Build a method name from a link title.

    Each whitespace-separated word gets its first letter upper-cased and the
    words are concatenated: 'get item' -> 'GetItem'.
    """
    if not title or not title.strip():
        raise MissingTitleError("link is missing a title; cannot derive a method name")

    parts = []
    for word in title.split():
        word = _sanitize_word(word)
        if word:
            parts.append(word[:1].upper() + word[1:])

    name = "".join(parts)
    if not name.isidentifier():
        raise SchemaError(f"cannot derive a method name from title {title!r}")
    return name


def snake_case(name: str) -> str:
    """Return the snake_case function name for a method name."""
    return re.sub(r"_+", "_", _camel_to_snake(name)).strip("_")


def request_validator_name(method_name: str) -> str:
    return f"HTTP{method_name}Request"


def response_validator_name(method_name: str) -> str:
    return f"HTTP{method_name}Response"


def looks_like_struct(type_name: str) -> bool:
    """Check whether a payload type name needs a placeholder class.

    The 'Any' placeholder, containers and builtin scalars don't.
    """
    type_name = type_name.strip()
    if type_name in _BUILTIN_TYPES:
        return False
    if type_name.startswith(_CONTAINER_PREFIXES):
        return False
    return bool(_DOTTED_NAME.match(type_name))


def render_imports(
    stdlib: list[str] | tuple[str, ...],
    thirdparty: list[str] | tuple[str, ...] = (),
    local: list[str] | tuple[str, ...] = (),
) -> str:
    """Render an import block grouped stdlib / third-party / local.

    Entries are either bare module names ('json') or complete import
    statements ('from typing import Any'). Returns '' when there is nothing
    to import.
    """
    groups = []
    for entries in (stdlib, thirdparty, local):
        lines = [e if e.startswith(("import ", "from ")) else f"import {e}" for e in entries]
        if lines:
            groups.append("\n".join(lines))
    if not groups:
        return ""
    return "\n\n".join(groups) + "\n"
