"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
from schemas import make_schema

from hsgen.config import Options
from hsgen.hyperschema import HyperSchema


@pytest.fixture
def petstore() -> HyperSchema:
    return HyperSchema.from_dict(make_schema())


@pytest.fixture
def hyperschema() -> Callable[..., HyperSchema]:
    """Build a HyperSchema from a list of links (and optional root keys)."""

    def _build(links: list[dict[str, Any]], **root: Any) -> HyperSchema:
        return HyperSchema.from_dict(make_schema(links=links, **root))

    return _build


@pytest.fixture
def options(tmp_path: Path) -> Options:
    return Options(output_dir=tmp_path / "out", app_pkg="shop")
