"""Patch the copied project's ``package.json``.

The manifest is modelled as a Pydantic record with the fields the patcher
touches and an escape hatch (``extra="allow"``) for everything else.  Key
order from the template is preserved when the file is written back.

Backend-specific configuration comes from one of two places:

* a ``backend-config.json`` side-file shipped in the template, keyed by
  backend id and merged through ``MERGE_RULES``; the side-file is deleted
  afterwards so it never ships in the generated project;
* otherwise the fixed script table returned by ``build_scripts``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from create_shiny_react.config import Config
from create_shiny_react.errors import ScaffoldError
from create_shiny_react.utils import load_json, print_warning, save_json

# ---------------------------------------------------------------------------
# Merge rules
# ---------------------------------------------------------------------------

REPLACE = "replace"
MERGE = "merge"

# Fields not listed here are replaced.  ``scripts`` is always replaced
# wholesale: script sets are per-backend and must not be mixed.
MERGE_RULES: dict[str, str] = {
    "scripts": REPLACE,
    "dependencies": MERGE,
    "devDependencies": MERGE,
    "peerDependencies": MERGE,
}


# ---------------------------------------------------------------------------
# Inline build scripts
# ---------------------------------------------------------------------------

_ESBUILD = (
    "esbuild srcts/main.tsx --bundle --outfile={outdir}/www/main.js "
    "--format=esm --minify --alias:react=react"
)


def build_scripts(backend_id: str) -> dict[str, str]:
    """Return the npm script set for *backend_id* (``r``, ``py`` or ``both``).

    Raises:
        ValueError: For an unknown backend id.
    """
    if backend_id in ("r", "py"):
        esbuild = _ESBUILD.format(outdir=backend_id)
        return {
            "build": f"{esbuild} && tsc --noEmit",
            "watch": f'concurrently "{esbuild} --watch" "tsc --noEmit --watch"',
            "clean": f"rm -rf {backend_id}/www",
        }
    if backend_id == "both":
        r_build = _ESBUILD.format(outdir="r")
        py_build = _ESBUILD.format(outdir="py")
        return {
            "build": 'concurrently "npm run build-r" "npm run build-py" "tsc --noEmit"',
            "watch": 'concurrently "npm run watch-r" "npm run watch-py" "tsc --noEmit --watch"',
            "build-r": r_build,
            "watch-r": f"{r_build} --watch",
            "build-py": py_build,
            "watch-py": f"{py_build} --watch",
            "clean": "rm -rf r/www py/www",
        }
    raise ValueError(f"Unknown backend: {backend_id!r}")


# ---------------------------------------------------------------------------
# Manifest model
# ---------------------------------------------------------------------------


class Manifest(BaseModel):
    """A ``package.json`` document."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    version: str | None = None
    description: str | None = None
    scripts: dict[str, str] | None = None
    dependencies: dict[str, str] | None = None
    devDependencies: dict[str, str] | None = None

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Manifest":
        manifest = cls.model_validate(data)
        manifest._key_order = list(data)
        return manifest

    # Extras are accessed through the extra dict so keys such as "copy" or
    # "json" never resolve to BaseModel methods.
    def get(self, key: str, default: Any = None) -> Any:
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key in type(self).model_fields:
            setattr(self, key, value)
        else:
            self.__pydantic_extra__[key] = value

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the template's key order, new non-null keys appended."""
        data = self.model_dump()
        ordered = {k: data[k] for k in self._key_order if k in data}
        ordered.update(
            {k: v for k, v in data.items() if k not in ordered and v is not None}
        )
        return ordered

    # -- Patching ----------------------------------------------------------

    def pin_dependencies(self, pins: dict[str, str]) -> None:
        """Rewrite versions of pinned packages already listed in dependencies."""
        if not isinstance(self.dependencies, dict):
            return
        updated = dict(self.dependencies)
        for package, version in pins.items():
            if package in updated:
                updated[package] = version
        self.dependencies = updated

    def apply(self, fragment: dict[str, Any]) -> None:
        """Apply a backend-config fragment field by field using ``MERGE_RULES``."""
        for key, value in fragment.items():
            rule = MERGE_RULES.get(key, REPLACE)
            current = self.get(key)
            if rule == MERGE and isinstance(value, dict) and isinstance(current, dict):
                self.set(key, {**current, **value})
            else:
                self.set(key, value)


# ---------------------------------------------------------------------------
# Patcher
# ---------------------------------------------------------------------------


def load_manifest(path: Path) -> Manifest:
    """Load ``package.json`` from *path*.

    Raises:
        ScaffoldError: If the file is not a valid JSON object.
    """
    try:
        data = load_json(path)
        if not isinstance(data, dict):
            raise ScaffoldError(f"{path.name} must contain a JSON object")
        return Manifest.from_dict(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ScaffoldError(f"Invalid {path.name}: {exc}") from exc


def _load_backend_fragment(side_file: Path, backend_id: str) -> dict[str, Any] | None:
    """Read the side-file entry for *backend_id*; ``None`` means skip the merge."""
    try:
        data = load_json(side_file)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        print_warning(f"Could not read {side_file.name}, skipping backend config: {exc}")
        return None
    if not isinstance(data, dict):
        print_warning(f"{side_file.name} is not a JSON object, skipping backend config")
        return None
    fragment = data.get(backend_id)
    if fragment is None:
        print_warning(f"{side_file.name} has no entry for backend '{backend_id}'")
        return None
    if not isinstance(fragment, dict):
        print_warning(f"{side_file.name} entry for '{backend_id}' is not an object")
        return None
    return fragment


def patch_manifest(
    target_dir: str | Path,
    project_name: str,
    backend_id: str,
    config: Config | None = None,
) -> Manifest | None:
    """Patch ``package.json`` in *target_dir* for the new project.

    Applies the backend configuration, then sets the project name and
    version and pins configured dependencies.  Returns the written manifest, or
    ``None`` when the template has no manifest.  The backend-config side-file
    is removed in every case.
    """
    config = config or Config()
    target = Path(target_dir)
    manifest_path = target / config.manifest_file
    side_file = target / config.backend_config_file

    try:
        if not manifest_path.is_file():
            return None

        manifest = load_manifest(manifest_path)

        if side_file.is_file():
            fragment = _load_backend_fragment(side_file, backend_id)
            if fragment is not None:
                manifest.apply(fragment)
        else:
            manifest.scripts = build_scripts(backend_id)

        # Applied after the backend config so a fragment cannot override them.
        manifest.name = project_name
        manifest.version = config.manifest_version
        manifest.pin_dependencies(config.dependency_pins)

        save_json(manifest.to_dict(), manifest_path)
        return manifest
    finally:
        side_file.unlink(missing_ok=True)
