"""Documentation injection.

Copies optional documentation templates (``CLAUDE.md`` by default) from the
shared templates root into the new project, substituting the project name.

Substitution is limited to an explicit set of placeholders:

* plain templates: every literal token in ``LITERAL_PLACEHOLDERS`` is
  replaced by the matching context value;
* ``*.j2`` templates: rendered with Jinja2 against ``CONTEXT_KEYS`` only,
  with ``StrictUndefined`` so an unknown variable fails loudly.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from create_shiny_react.config import DEFAULT_DOCS, DocSpec
from create_shiny_react.utils import print_warning

# Literal token in a plain template -> context key.
LITERAL_PLACEHOLDERS: dict[str, str] = {
    "hello-world-app": "project_name",
}

CONTEXT_KEYS: tuple[str, ...] = (
    "project_name",
    "template_id",
    "template_name",
    "backend_id",
    "backend_label",
)

JINJA_SUFFIX = ".j2"


class DocRenderer:
    """Renders documentation templates found under *template_dir*."""

    def __init__(self, template_dir: str | Path) -> None:
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter

    def render(self, source: str, context: dict[str, Any]) -> str:
        """Render the template at *source* (relative to the template dir)."""
        values = _restrict(context)
        if source.endswith(JINJA_SUFFIX):
            # Jinja loader paths always use forward slashes.
            return self.env.get_template(Path(source).as_posix()).render(**values)
        text = (self.template_dir / source).read_text(encoding="utf-8")
        return substitute_literals(text, values)


def substitute_literals(text: str, context: dict[str, Any]) -> str:
    """Replace every ``LITERAL_PLACEHOLDERS`` token with its context value."""
    for token, key in LITERAL_PLACEHOLDERS.items():
        if key in context:
            text = text.replace(token, str(context[key]))
    return text


def inject_docs(
    templates_root: str | Path,
    target_dir: str | Path,
    project_name: str,
    context: dict[str, Any] | None = None,
    docs: Iterable[DocSpec] = DEFAULT_DOCS,
) -> list[Path]:
    """Copy each doc in *docs* into *target_dir*, returning the written paths.

    *context* supplies the optional placeholders (template and backend);
    ``project_name`` is always available.

    A missing source file, or one that cannot be decoded or rendered, is
    reported as a warning and skipped; the other docs are still written.
    """
    values = {**(context or {}), "project_name": project_name}
    renderer = DocRenderer(templates_root)
    target = Path(target_dir)
    written: list[Path] = []

    for doc in docs:
        if not (renderer.template_dir / doc.source).is_file():
            print_warning(f"{doc.source} not found, skipping...")
            continue
        out = target / doc.target
        try:
            content = renderer.render(doc.source, values)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(content, encoding="utf-8")
        except (OSError, UnicodeDecodeError, TemplateError) as exc:
            print_warning(f"Could not render {doc.source}, skipping: {exc}")
            continue
        written.append(out)

    return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _restrict(context: dict[str, Any]) -> dict[str, Any]:
    return {k: context[k] for k in CONTEXT_KEYS if k in context}


def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)
