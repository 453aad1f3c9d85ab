"""Exception hierarchy for create-shiny-react-app.

Every fatal condition raised by the scaffolding pipeline derives from
``ScaffoldError`` so the CLI entry point can report it and exit with status 1.
Recoverable conditions (corrupt metadata, missing optional docs) never raise;
they are reported as warnings instead.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for every fatal scaffolding error."""


class RegistryError(ScaffoldError):
    """Raised when the templates root is missing or holds no templates."""


class SelectionError(ScaffoldError):
    """Raised when the interactive session cannot produce a choice."""


class MaterializationError(ScaffoldError):
    """Raised when a template source cannot be copied into the new project."""

    def __init__(self, path: Path, reason: str | None = None) -> None:
        self.path = path
        self.reason = reason
        if reason is None:
            super().__init__(f"Template directory not found at {path}")
        else:
            super().__init__(f"Could not copy {path}: {reason}")


class TargetExistsError(ScaffoldError):
    """Raised when the target project directory already exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Directory "{name}" already exists')
