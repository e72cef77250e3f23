"""Generation options supplied by the command line (or any other caller)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .errors import ConfigError

# Artifact kinds a caller may force-overwrite
USER_KINDS = frozenset({"handlers", "models", "main", "package", "tests"})
SYSTEM_KINDS = frozenset({"routes", "client", "validator"})
ARTIFACT_KINDS = USER_KINDS | SYSTEM_KINDS

# Kinds that accept extra import hints
IMPORT_KINDS = frozenset({"server", "client", "validator"})


@dataclass(frozen=True)
class Options:
    output_dir: Path
    app_pkg: str
    overwrite: bool = False
    force: frozenset[str] = frozenset()
    validator_pkg: str = "validator"
    client_pkg: str = "client"
    imports: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "force", frozenset(self.force))
        for label, value in (
            ("application package", self.app_pkg),
            ("validator module", self.validator_pkg),
            ("client module", self.client_pkg),
        ):
            if not value or not value.isidentifier():
                raise ConfigError(f"{label} name must be a Python identifier, got {value!r}")
        if self.validator_pkg == self.client_pkg:
            raise ConfigError("validator and client modules must have different names")
        if self.validator_pkg in ("server", "handlers", "models") or self.client_pkg in (
            "server",
            "handlers",
            "models",
        ):
            raise ConfigError("validator/client module names clash with generated modules")

        unknown = self.force - ARTIFACT_KINDS
        if unknown:
            raise ConfigError(
                f"unknown artifact kind(s) to force: {', '.join(sorted(unknown))}"
                f" (known: {', '.join(sorted(ARTIFACT_KINDS))})"
            )
        unknown = set(self.imports) - IMPORT_KINDS
        if unknown:
            raise ConfigError(f"imports can only be given for {', '.join(sorted(IMPORT_KINDS))}")

    @property
    def app_dir(self) -> Path:
        return self.output_dir / self.app_pkg

    def imports_for(self, kind: str) -> tuple[str, ...]:
        return tuple(self.imports.get(kind, ()))
