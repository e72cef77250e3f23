"""Validator flavor: the module registering every payload validator."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, TextIO

from ..codegen import SYSTEM, Artifact
from ..parser import Result
from ..validation import ValidatorGenerator
from .base import Flavor


def render_validator(result: Result, out: TextIO, imports: Iterable[str] = ()) -> None:
    """Write the validator registration module for all request/response validators."""
    out.write("# DO NOT EDIT. Automatically generated by hsgen.\n")
    out.write('"""JSON Schema validators for request and response payloads."""\n\n')
    validators = list(result.request_validators.values()) + list(result.response_validators.values())
    ValidatorGenerator(imports).process(out, validators)


class ValidatorFlavor(Flavor):
    name = "validator"

    def artifacts(self, result: Result) -> list[Artifact]:
        path = Path(self.options.app_pkg) / f"{self.options.validator_pkg}.py"
        imports = self.imports(result, "validator")
        return [Artifact("validator", path, SYSTEM, lambda out: render_validator(result, out, imports))]
