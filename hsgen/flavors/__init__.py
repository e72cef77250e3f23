"""Registry of flavors: each tag names one renderer set."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from ..config import Options
from ..errors import UnknownFlavorError
from ..hyperschema import HyperSchema
from .base import Flavor
from .client import ClientFlavor
from .server import ServerFlavor
from .validator import ValidatorFlavor

logger = logging.getLogger(__name__)

FLAVORS: dict[str, type[Flavor]] = {
    flavor.name: flavor for flavor in (ServerFlavor, ClientFlavor, ValidatorFlavor)
}

DEFAULT_FLAVORS = ("server", "client")


def get_flavor(name: str) -> type[Flavor]:
    try:
        return FLAVORS[name]
    except KeyError:
        raise UnknownFlavorError(
            f"unknown flavor {name!r} (known: {', '.join(sorted(FLAVORS))})"
        ) from None


def generate(
    schema: HyperSchema,
    options: Options,
    flavors: Iterable[str] = DEFAULT_FLAVORS,
) -> list[Path]:
    """Run each flavor over the schema in order; return the files written."""
    classes = [get_flavor(name) for name in flavors]
    written: list[Path] = []
    for cls in classes:
        logger.info(" ===> running flavor '%s'", cls.name)
        written.extend(cls(options).generate(schema))
    logger.info(" <=== All files generated")
    return written


__all__ = ["DEFAULT_FLAVORS", "FLAVORS", "Flavor", "generate", "get_flavor"]
