"""Generate WSGI servers, httpx clients and validators from JSON Hyper-Schema."""

__version__ = "0.1.0"

from .config import Options
from .errors import HsgenError, SchemaError
from .flavors import DEFAULT_FLAVORS, FLAVORS, generate
from .hyperschema import HyperSchema, Link
from .loader import load_schema
from .parser import Result, parse

__all__ = [
    "DEFAULT_FLAVORS",
    "FLAVORS",
    "HsgenError",
    "HyperSchema",
    "Link",
    "Options",
    "Result",
    "SchemaError",
    "generate",
    "load_schema",
    "parse",
]
