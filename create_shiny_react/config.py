"""create-shiny-react-app configuration.

Centralised, typed configuration for the scaffolding pipeline.  Settings use
Pydantic v2 models so they are validated at construction time and can be
overridden from environment variables without boiler-plate.  The static
backend and package-manager tables live here as well, since they are fixed
choices rather than something discovered on disk.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from create_shiny_react.errors import ScaffoldError
from create_shiny_react.utils import console

# ---------------------------------------------------------------------------
# Static choice tables
# ---------------------------------------------------------------------------


class Backend(BaseModel):
    """A server-side runtime the generated project can target."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    directories: tuple[str, ...] = Field(
        description="Backend subtrees kept in the generated project",
    )

    @property
    def includes_python(self) -> bool:
        return "py" in self.directories

    @property
    def includes_r(self) -> bool:
        return "r" in self.directories


BACKENDS: tuple[Backend, ...] = (
    Backend(id="r", label="R (Shiny for R)", directories=("r",)),
    Backend(id="py", label="Python (Shiny for Python)", directories=("py",)),
    Backend(id="both", label="Both R and Python", directories=("r", "py")),
)

BACKEND_DIRECTORIES: frozenset[str] = frozenset(
    d for backend in BACKENDS for d in backend.directories
)


class PackageManager(BaseModel):
    """Python package manager used in the printed setup instructions."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    install_command: str
    run_prefix: str = ""


PACKAGE_MANAGERS: tuple[PackageManager, ...] = (
    PackageManager(
        id="pip",
        label="pip",
        install_command="pip install -r py/requirements.txt",
    ),
    PackageManager(
        id="uv",
        label="uv",
        install_command="uv pip install -r py/requirements.txt",
        run_prefix="uv run ",
    ),
)


class DocSpec(BaseModel):
    """A documentation template copied from the shared templates root."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="File name relative to the templates root")
    target: str = Field(..., description="File name relative to the new project")


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

# Never copied out of a template, whatever backend is selected.
DEFAULT_SKIP_NAMES: tuple[str, ...] = ("node_modules", "www")

# Never offered as templates when scanning the templates root.
DEFAULT_REGISTRY_SKIP_NAMES: tuple[str, ...] = (
    "node_modules",
    "www",
    "dist",
    "build",
    "__pycache__",
)

DEFAULT_DOCS: tuple[DocSpec, ...] = (
    DocSpec(source="CLAUDE.md.template", target="CLAUDE.md"),
)

_PACKAGE_TEMPLATES_DIR = Path(__file__).parent / "templates"
_DEV_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    """Global create-shiny-react-app configuration.

    Instances are typically created once by the CLI entry point and then
    passed through the rest of the pipeline.
    """

    templates_dir: Path | None = Field(
        default=None,
        description="Templates root; resolved from package data when omitted",
    )
    skip_names: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_NAMES))
    registry_skip_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REGISTRY_SKIP_NAMES)
    )
    manifest_file: str = Field(default="package.json")
    backend_config_file: str = Field(default="backend-config.json")
    manifest_version: str = Field(default="1.0.0")
    dependency_pins: dict[str, str] = Field(
        default_factory=lambda: {"@posit/shiny-react": "^0.0.6"}
    )
    docs: list[DocSpec] = Field(default_factory=lambda: list(DEFAULT_DOCS))
    allow_both_backends: bool = Field(default=True)
    port: int = Field(default=8000, ge=1, le=65535)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def backends(self) -> list[Backend]:
        """Backends offered to the user, in menu order."""
        if self.allow_both_backends:
            return list(BACKENDS)
        return [b for b in BACKENDS if len(b.directories) == 1]

    @property
    def default_backend_index(self) -> int:
        """1-based default backend choice (``both`` when it is offered)."""
        return len(self.backends) if self.allow_both_backends else 1

    def resolve_templates_dir(self) -> Path:
        """Locate the templates root.

        Resolution order: the configured ``templates_dir``, then the
        ``templates`` directory shipped inside the package, then a
        development checkout's top-level ``templates`` directory.  When none
        exists the configured (or packaged) path is returned unchanged so the
        registry reports it as missing.
        """
        if self.templates_dir is not None:
            return Path(self.templates_dir)
        if _PACKAGE_TEMPLATES_DIR.is_dir():
            return _PACKAGE_TEMPLATES_DIR
        if _DEV_TEMPLATES_DIR.is_dir():
            console.print("Using development templates directory")
            return _DEV_TEMPLATES_DIR
        return _PACKAGE_TEMPLATES_DIR

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CSR_TEMPLATES_DIR, CSR_ALLOW_BOTH_BACKENDS, CSR_PORT.

        Keyword *overrides* that are not ``None`` win over the environment.

        Raises:
            ScaffoldError: If a variable or override holds an invalid value.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CSR_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["CSR_TEMPLATES_DIR"])
        if os.environ.get("CSR_ALLOW_BOTH_BACKENDS"):
            kwargs["allow_both_backends"] = _env_flag(os.environ["CSR_ALLOW_BOTH_BACKENDS"])
        if os.environ.get("CSR_PORT"):
            raw_port = os.environ["CSR_PORT"]
            try:
                kwargs["port"] = int(raw_port)
            except ValueError as exc:
                raise ScaffoldError(
                    f"Invalid configuration: CSR_PORT must be an integer, got {raw_port!r}"
                ) from exc

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise ScaffoldError(f"Invalid configuration: {problems}") from exc
