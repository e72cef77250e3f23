"""Render templates, format the output and write generated files.

Files come in two classes:
  system-owned  fully generator-controlled, rewritten whenever overwrite is on
  user-owned    written once for the author to edit; rewritten only when
                overwrite is on AND the artifact kind is forced
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TextIO

import black
import jinja2

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

SYSTEM = "system"
USER = "user"

# Renders one complete file into the given stream
RenderFn = Callable[[TextIO], None]

_env: jinja2.Environment | None = None


def environment() -> jinja2.Environment:
    global _env
    if _env is None:
        _env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        _env.filters["pyrepr"] = repr
    return _env


def render_template(name: str, **context: Any) -> str:
    return environment().get_template(name).render(**context)


def format_source(text: str) -> str:
    """Format Python source with black, falling back to the raw text."""
    try:
        return black.format_str(text, mode=black.Mode())
    except Exception as e:
        # InvalidInput on syntax errors; the raw text is written either way
        logger.warning("Failed to cleanup Python code (probably a syntax error). Generating file anyway: %s", e)
        return text


@dataclass(frozen=True)
class Artifact:
    """One generated file."""

    kind: str
    path: Path
    owner: str
    render: RenderFn


def write_artifact(
    path: Path,
    owner: str,
    render: RenderFn,
    *,
    overwrite: bool = False,
    force: bool = False,
    formatter: Callable[[str], str] | None = format_source,
) -> bool:
    """Render and write one file according to the overwrite policy.

    Returns True when the file was written, False when it was skipped.
    """
    path = Path(path)
    if path.exists():
        if not overwrite or (owner == USER and not force):
            logger.info(" - File '%s' already exists. Skipping", path)
            return False
        logger.info(" * File '%s' already exists. Overwriting", path)

    logger.info(" + Generating file '%s'", path)
    buf = io.StringIO()
    render(buf)
    text = buf.getvalue()
    if formatter is not None:
        text = formatter(text)

    path.parent.mkdir(parents=True, exist_ok=True)
    mode = path.stat().st_mode & 0o777 if path.exists() else _default_mode()
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return True


def _default_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask
