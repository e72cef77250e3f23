"""Walk a hyper-schema's links once and build the intermediate Result.

Handles:
- method names derived from link titles (sorted for reproducible output)
- request/response validators named HTTP<Method>Request/Response
- payload type inference, overridden by the pytype extension
- path -> method routing (last link wins on duplicate paths)
- wrapper, mutator, CORS and multipart hints from link extras
- root-level middlewares and per-artifact import hints

A Result is frozen once parse() returns; renderers only read it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping

from . import ext
from .errors import HsgenError, URITemplateError
from .hyperschema import HyperSchema, Link, resolve
from .naming import request_validator_name, response_validator_name, title_to_name
from .validation import ValidatorHandle, build_validator

logger = logging.getLogger(__name__)

ANY_TYPE = "Any"
MAP_TYPE = "dict[str, Any]"

FORM_ENCODING = "application/x-www-form-urlencoded"
MULTIPART_ENCODING = "multipart/form-data"


@dataclass
class ParseState:
    """Tables built up while walking the links; frozen into a Result."""

    schema: HyperSchema
    method_names: list[str] = field(default_factory=list)
    methods: dict[str, str] = field(default_factory=dict)
    links: dict[str, Link] = field(default_factory=dict)
    path_to_methods: dict[str, str] = field(default_factory=dict)
    request_payload_type: dict[str, str] = field(default_factory=dict)
    response_payload_type: dict[str, str] = field(default_factory=dict)
    request_validators: dict[str, ValidatorHandle] = field(default_factory=dict)
    response_validators: dict[str, ValidatorHandle] = field(default_factory=dict)
    method_wrappers: dict[str, tuple[str, ...]] = field(default_factory=dict)
    request_cors: dict[str, str] = field(default_factory=dict)
    request_mutators: dict[str, tuple[str, ...]] = field(default_factory=dict)
    multipart_fields: dict[str, tuple[str, ...]] = field(default_factory=dict)
    middlewares: tuple[str, ...] = ()
    hints: dict[str, ext.ArtifactHints] = field(default_factory=dict)

    def resolve(self, schema: dict[str, Any]) -> dict[str, Any]:
        return resolve(schema, self.schema.root)

    def freeze(self) -> Result:
        return Result(
            schema=self.schema,
            method_names=tuple(sorted(set(self.method_names))),
            methods=MappingProxyType(dict(self.methods)),
            links=MappingProxyType(dict(self.links)),
            path_to_methods=MappingProxyType(dict(self.path_to_methods)),
            request_payload_type=MappingProxyType(dict(self.request_payload_type)),
            response_payload_type=MappingProxyType(dict(self.response_payload_type)),
            request_validators=MappingProxyType(dict(self.request_validators)),
            response_validators=MappingProxyType(dict(self.response_validators)),
            method_wrappers=MappingProxyType(dict(self.method_wrappers)),
            request_cors=MappingProxyType(dict(self.request_cors)),
            request_mutators=MappingProxyType(dict(self.request_mutators)),
            multipart_fields=MappingProxyType(dict(self.multipart_fields)),
            middlewares=self.middlewares,
            hints=MappingProxyType(dict(self.hints)),
        )


@dataclass(frozen=True)
class Result:
    """Everything the renderers need to know about one hyper-schema."""

    schema: HyperSchema
    method_names: tuple[str, ...]
    methods: Mapping[str, str]
    links: Mapping[str, Link]
    path_to_methods: Mapping[str, str]
    request_payload_type: Mapping[str, str]
    response_payload_type: Mapping[str, str]
    request_validators: Mapping[str, ValidatorHandle]
    response_validators: Mapping[str, ValidatorHandle]
    method_wrappers: Mapping[str, tuple[str, ...]]
    request_cors: Mapping[str, str]
    request_mutators: Mapping[str, tuple[str, ...]]
    multipart_fields: Mapping[str, tuple[str, ...]]
    middlewares: tuple[str, ...]
    hints: Mapping[str, ext.ArtifactHints]

    def is_form(self, name: str) -> bool:
        """GET and url-encoded links bind their payload from form values."""
        link = self.links[name]
        return link.http_method == "get" or link.enc_type == FORM_ENCODING

    def is_multipart(self, name: str) -> bool:
        return name in self.multipart_fields


# Builds the flavor-specific source fragment of one method
MethodBuilder = Callable[[ParseState, str, Link], "str | None"]


def parse(schema: HyperSchema, method_builder: MethodBuilder | None = None) -> Result:
    """Parse every link of the hyper-schema into a Result."""
    state = ParseState(schema=schema)
    extras = schema.extras
    state.middlewares = ext.decode_middlewares(extras)
    state.hints = ext.decode_artifact_hints(extras)

    for index, link in enumerate(schema.links):
        try:
            _parse_link(state, link, method_builder)
        except HsgenError as e:
            raise type(e)(f"link #{index} ({link.method} {link.href}): {e}") from e

    return state.freeze()


def _parse_link(state: ParseState, link: Link, method_builder: MethodBuilder | None) -> None:
    name = title_to_name(link.title)
    where = f"link {link.title!r} ({link.method} {link.path})"

    if "{" in link.path:
        raise URITemplateError(f"{where}: found '{{' in the URL. hsgen does not support URI templates")

    if name in state.links:
        logger.warning("%s: method name %s is already taken, the later link wins", where, name)
        for path in [p for p, m in state.path_to_methods.items() if m == name]:
            del state.path_to_methods[path]

    # Validators first: method builders depend on them
    if link.schema is not None:
        ls = state.resolve(link.schema)
        v = build_validator(ls, state.schema.root, request_validator_name(name))
        if link.http_method == "get" or link.enc_type == FORM_ENCODING:
            payload_type = MAP_TYPE
        else:
            payload_type = ANY_TYPE
        state.request_payload_type[name] = ext.type_hint(ls, where) or payload_type
        state.request_validators[name] = v
    else:
        state.request_payload_type.pop(name, None)
        state.request_validators.pop(name, None)

    if link.target_schema is not None:
        ls = state.resolve(link.target_schema)
        v = build_validator(ls, state.schema.root, response_validator_name(name))
        state.response_payload_type[name] = ext.type_hint(ls, where) or ANY_TYPE
        state.response_validators[name] = v
    else:
        state.response_payload_type.pop(name, None)
        state.response_validators.pop(name, None)

    hints = ext.decode_link_hints(link.extras, where)
    _store(state.method_wrappers, name, hints.wrappers)
    _store(state.request_mutators, name, hints.mutators)
    _store(state.request_cors, name, hints.cors)
    if hints.multipart or link.enc_type == MULTIPART_ENCODING:
        state.multipart_fields[name] = hints.multipart
    else:
        state.multipart_fields.pop(name, None)

    state.method_names.append(name)
    state.links[name] = link

    previous = state.path_to_methods.get(link.path)
    if previous is not None and previous != name:
        logger.warning("%s: path %s was routed to %s, the later link wins", where, link.path, previous)
    state.path_to_methods[link.path] = name

    if method_builder is not None:
        fragment = method_builder(state, name, link)
        if fragment is not None:
            state.methods[name] = fragment


def _store(table: dict[str, Any], name: str, value: Any) -> None:
    if value:
        table[name] = value
    else:
        table.pop(name, None)
