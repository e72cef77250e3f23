"""In-memory view of a JSON Hyper-Schema document.

Only the parts hsgen needs are modelled: the root document (kept as a plain
dict for ``$ref`` resolution), its ordered ``links`` and every key that is
not a hyper-schema keyword ("extras", where vendor hints live).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from .errors import SchemaError, UnresolvableReferenceError

# Keys a link may carry that are not vendor extras
_LINK_KEYWORDS = {
    "rel",
    "href",
    "title",
    "method",
    "encType",
    "mediaType",
    "schema",
    "targetSchema",
    "description",
}

# Root keys that are ordinary JSON Schema keywords
_SCHEMA_KEYWORDS = {
    "$schema",
    "$ref",
    "id",
    "$id",
    "title",
    "description",
    "type",
    "definitions",
    "$defs",
    "properties",
    "required",
    "links",
}


@dataclass(frozen=True)
class Link:
    """One hyper-schema link: a single HTTP operation."""

    title: str | None
    href: str
    method: str = "GET"
    enc_type: str = "application/json"
    schema: dict[str, Any] | None = None
    target_schema: dict[str, Any] | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.href

    @property
    def http_method(self) -> str:
        """Lower-cased HTTP method, 'get' when the link doesn't name one."""
        return (self.method or "get").lower()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Link:
        if not isinstance(data, dict):
            raise SchemaError(f"link must be an object, got {type(data).__name__}")
        for key in ("schema", "targetSchema"):
            if key in data and not isinstance(data[key], dict):
                raise SchemaError(f"link {data.get('title')!r}: {key} must be an object")
        return cls(
            title=data.get("title"),
            href=str(data.get("href", "")),
            method=str(data.get("method") or "GET"),
            enc_type=str(data.get("encType") or "application/json"),
            schema=data.get("schema"),
            target_schema=data.get("targetSchema"),
            extras={k: v for k, v in data.items() if k not in _LINK_KEYWORDS},
        )


@dataclass(frozen=True)
class HyperSchema:
    """A parsed hyper-schema document."""

    root: dict[str, Any]
    links: tuple[Link, ...]

    @property
    def extras(self) -> dict[str, Any]:
        return {k: v for k, v in self.root.items() if k not in _SCHEMA_KEYWORDS}

    @classmethod
    def from_dict(cls, root: dict[str, Any]) -> HyperSchema:
        if not isinstance(root, dict):
            raise SchemaError("hyper-schema document must be a JSON object")
        links = root.get("links", [])
        if not isinstance(links, list):
            raise SchemaError("'links' must be an array")
        return cls(root=root, links=tuple(Link.from_dict(link) for link in links))


def resolve_ref(root: dict[str, Any], ref: str) -> Any:
    """Resolve a JSON pointer reference ('#/definitions/item') against root."""
    if not ref.startswith("#"):
        raise UnresolvableReferenceError(f"external reference {ref!r} is not supported")

    pointer = unquote(ref[1:])
    node: Any = root
    if not pointer:
        return node

    for part in pointer.lstrip("/").split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        try:
            if isinstance(node, list):
                node = node[int(part)]
            else:
                node = node[part]
        except (KeyError, IndexError, ValueError, TypeError):
            raise UnresolvableReferenceError(f"reference {ref!r} does not resolve") from None
    return node


def resolve(schema: dict[str, Any], root: dict[str, Any]) -> dict[str, Any]:
    """Follow a top-level ``$ref`` chain until a concrete schema is reached."""
    seen: list[str] = []
    while isinstance(schema, dict) and "$ref" in schema:
        ref = schema["$ref"]
        if not isinstance(ref, str):
            raise UnresolvableReferenceError(f"$ref must be a string, got {ref!r}")
        if ref in seen:
            raise UnresolvableReferenceError(f"reference loop through {' -> '.join(seen + [ref])}")
        seen.append(ref)
        schema = resolve_ref(root, ref)

    if not isinstance(schema, dict):
        if seen:
            raise UnresolvableReferenceError(f"reference {seen[-1]!r} does not point at a schema")
        raise SchemaError(f"expected a schema object, got {schema!r}")
    return schema
