"""Load a hyper-schema document from disk or over HTTP.

JSON is the native format; .yaml/.yml files are read with PyYAML.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

from .errors import SchemaError
from .hyperschema import HyperSchema

logger = logging.getLogger(__name__)


def load_schema(source: str | Path) -> HyperSchema:
    """Load and wrap a hyper-schema from a file path or URL."""
    source = str(source)
    logger.info(" ===> Using schema file '%s'", source)
    if source.startswith(("http://", "https://")):
        data = _load_from_url(source)
    else:
        data = _load_from_file(Path(source))
    return HyperSchema.from_dict(data)


def _load_from_file(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            try:
                return yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise SchemaError(f"{path}: invalid YAML: {e}") from e
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(f"{path}: invalid JSON: {e}") from e


def _load_from_url(url: str) -> Any:
    try:
        response = httpx.get(url, timeout=30, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise SchemaError(f"failed to fetch {url}: {e}") from e
    if url.endswith((".yaml", ".yml")):
        return yaml.safe_load(response.text)
    return response.json()
