"""Common shape of a flavor: parse a schema, list artifacts, write them."""

from __future__ import annotations

from pathlib import Path

from ..codegen import Artifact, write_artifact
from ..config import Options
from ..hyperschema import HyperSchema, Link
from ..parser import ParseState, Result, parse


class Flavor:
    """A renderer set selected by its tag."""

    name = ""

    def __init__(self, options: Options):
        self.options = options

    def build_method(self, state: ParseState, name: str, link: Link) -> str | None:
        """Return the flavor's source fragment for one method, if it has one."""
        return None

    def parse(self, schema: HyperSchema) -> Result:
        return parse(schema, self.build_method)

    def artifacts(self, result: Result) -> list[Artifact]:
        raise NotImplementedError

    def generate(self, schema: HyperSchema) -> list[Path]:
        """Parse the schema and write every artifact; return the files written."""
        result = self.parse(schema)
        written = []
        for artifact in self.artifacts(result):
            path = self.options.output_dir / artifact.path
            if write_artifact(
                path,
                artifact.owner,
                artifact.render,
                overwrite=self.options.overwrite,
                force=artifact.kind in self.options.force,
            ):
                written.append(path)
        return written

    def imports(self, result: Result, kind: str) -> tuple[str, ...]:
        """Schema import hints for an artifact kind, then the caller's."""
        seen: dict[str, None] = {}
        for entry in result.hints[kind].imports + self.options.imports_for(kind):
            seen.setdefault(entry, None)
        return tuple(seen)
