"""Exceptions raised while parsing a hyper-schema or generating files.

Schema errors abort the current parse and are never retried; their messages
name the offending link so the schema fragment can be located.
"""

from __future__ import annotations


class HsgenError(Exception):
    """Base class for every error raised by hsgen."""


class ConfigError(HsgenError):
    """Invalid generation options."""


class UnknownFlavorError(HsgenError):
    """No renderer set is registered under the requested flavor tag."""


class SchemaError(HsgenError):
    """The hyper-schema cannot be turned into generated code."""


class MissingTitleError(SchemaError):
    """A link has no title, so no method name can be derived from it."""


class URITemplateError(SchemaError):
    """A link path contains a URI template placeholder."""


class MultiTypePropertyError(SchemaError):
    """A query-bound property declares more than one type."""


class ExtrasTypeError(SchemaError):
    """A vendor extension key holds a value of the wrong shape."""


class UnresolvableReferenceError(SchemaError):
    """A ``$ref`` points outside the document, nowhere, or at itself."""
