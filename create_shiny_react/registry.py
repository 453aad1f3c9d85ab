"""Template discovery.

Scans the shared templates root for candidate template directories and
derives a display name and description for each one.  A template's
``package.json`` is read for its description only; a corrupt or unreadable
metadata file never stops discovery.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from create_shiny_react.config import DEFAULT_REGISTRY_SKIP_NAMES
from create_shiny_react.errors import RegistryError
from create_shiny_react.utils import load_json

DEFAULT_DESCRIPTION = "Shiny-React template"
METADATA_FILE = "package.json"


class TemplateDescriptor(BaseModel):
    """One selectable template under the templates root."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = DEFAULT_DESCRIPTION
    path: Path


def display_name(template_id: str) -> str:
    """Derive a human-readable name from a template directory name.

    A leading numeric segment is dropped and the remaining hyphen-separated
    words are title-cased::

        display_name("1-basic")         -> "Basic"
        display_name("3-ai-chat")       -> "Ai Chat"
        display_name("dashboard")       -> "Dashboard"
    """
    parts = [p for p in template_id.split("-") if p]
    if parts and parts[0].isdigit():
        parts = parts[1:]
    if not parts:
        return template_id
    return " ".join(p[:1].upper() + p[1:] for p in parts)


def _read_description(template_path: Path) -> str:
    metadata = template_path / METADATA_FILE
    if not metadata.is_file():
        return DEFAULT_DESCRIPTION
    try:
        data = load_json(metadata)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return DEFAULT_DESCRIPTION
    if isinstance(data, dict):
        description = data.get("description")
        if isinstance(description, str) and description.strip():
            return description
    return DEFAULT_DESCRIPTION


def discover_templates(
    root: str | Path,
    skip_names: Iterable[str] = DEFAULT_REGISTRY_SKIP_NAMES,
) -> list[TemplateDescriptor]:
    """Return the templates found directly under *root*, sorted by id.

    Hidden entries, entries named in *skip_names*, and plain files are
    ignored.

    Raises:
        RegistryError: If *root* is not an existing directory, or if no
            template survives filtering.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise RegistryError(f"Templates directory not found: {root_path}")

    skip = set(skip_names)
    templates: list[TemplateDescriptor] = []

    for entry in sorted(root_path.iterdir(), key=lambda p: p.name):
        if entry.name.startswith(".") or entry.name in skip:
            continue
        if not entry.is_dir():
            continue
        templates.append(
            TemplateDescriptor(
                id=entry.name,
                name=display_name(entry.name),
                description=_read_description(entry),
                path=entry,
            )
        )

    if not templates:
        raise RegistryError(f"No templates found in {root_path}")
    return templates
