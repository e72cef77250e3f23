"""CLI entry point for hsgen."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import ARTIFACT_KINDS, IMPORT_KINDS, Options
from .errors import HsgenError
from .flavors import DEFAULT_FLAVORS, FLAVORS, generate
from .loader import load_schema


def _parse_imports(values: tuple[str, ...]) -> dict[str, tuple[str, ...]]:
    """Turn KIND=MODULE pairs into per-kind import lists."""
    imports: dict[str, list[str]] = {}
    for value in values:
        kind, sep, module = value.partition("=")
        if not sep or not module or kind not in IMPORT_KINDS:
            raise click.BadParameter(
                f"expected KIND=MODULE with KIND one of {', '.join(sorted(IMPORT_KINDS))}, got {value!r}",
                param_hint="--import",
            )
        imports.setdefault(kind, []).append(module)
    return {kind: tuple(modules) for kind, modules in imports.items()}


@click.command()
@click.argument("schema")
@click.option("-o", "--dir", "output_dir", default=".", type=click.Path(file_okay=False, path_type=Path), help="Output directory.")
@click.option("--app-pkg", default=None, help="Application package name (default: output directory name).")
@click.option("--flavor", "flavors", multiple=True, type=click.Choice(sorted(FLAVORS)), help="Renderer set to run (repeatable).")
@click.option("--overwrite", is_flag=True, help="Overwrite generated files that already exist.")
@click.option("--force", multiple=True, type=click.Choice(sorted(ARTIFACT_KINDS)), help="Also overwrite this user-owned artifact kind (repeatable).")
@click.option("--validator-pkg", default="validator", show_default=True, help="Validator module name.")
@click.option("--client-pkg", default="client", show_default=True, help="Client module name.")
@click.option("--import", "imports", multiple=True, metavar="KIND=MODULE", help="Extra import for the server, client or validator module.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.version_option(__version__)
def main(
    schema: str,
    output_dir: Path,
    app_pkg: str | None,
    flavors: tuple[str, ...],
    overwrite: bool,
    force: tuple[str, ...],
    validator_pkg: str,
    client_pkg: str,
    imports: tuple[str, ...],
    verbose: bool,
):
    """Generate a server, client and validators from a JSON Hyper-Schema file."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")

    if app_pkg is None:
        app_pkg = output_dir.resolve().name

    try:
        options = Options(
            output_dir=output_dir,
            app_pkg=app_pkg,
            overwrite=overwrite,
            force=frozenset(force),
            validator_pkg=validator_pkg,
            client_pkg=client_pkg,
            imports=_parse_imports(imports),
        )
        written = generate(load_schema(schema), options, flavors or DEFAULT_FLAVORS)
    except (HsgenError, OSError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Generated {len(written)} files in {output_dir}")
