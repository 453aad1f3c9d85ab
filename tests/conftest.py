"""Shared pytest fixtures for the create-shiny-react-app test suite.

Provides reusable fixtures for:
- A templates root with two templates, decoys and a docs template
- Prompt sessions fed from scripted answers
- A clean working directory for CLI runs
"""

from __future__ import annotations

import io
import json
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from create_shiny_react.config import Config
from create_shiny_react.selector import PromptSession


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

BASIC_PACKAGE_JSON = {
    "name": "hello-world-app",
    "version": "0.0.1",
    "private": True,
    "description": "A minimal shiny-react app",
    "scripts": {"build": "echo template"},
    "dependencies": {
        "@posit/shiny-react": "file:../..",
        "react": "^19.0.0",
    },
    "devDependencies": {"esbuild": "^0.25.0", "typescript": "^5.0.0"},
}

CLAUDE_TEMPLATE = (
    "# hello-world-app\n"
    "\n"
    "Run `cd hello-world-app && npm run watch` to start.\n"
)


def write_file(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def build_template(root: Path, package_json: dict | str | None = None) -> Path:
    """Create a template with a frontend, both backends and build artefacts."""
    root.mkdir(parents=True)
    if isinstance(package_json, dict):
        write_file(root / "package.json", json.dumps(package_json, indent=2))
    elif isinstance(package_json, str):
        write_file(root / "package.json", package_json)
    write_file(root / "tsconfig.json", '{"compilerOptions": {}}\n')
    write_file(root / "srcts" / "main.tsx", "export {};\n")
    write_file(root / "srcts" / "components" / "App.tsx", "export const App = 1;\n")
    write_file(root / "r" / "app.R", "library(shiny)\n")
    write_file(root / "r" / "www" / "main.js", "// built\n")
    write_file(root / "py" / "app.py", "from shiny import App\n")
    write_file(root / "py" / "www" / "main.js", "// built\n")
    write_file(root / "node_modules" / "react" / "index.js", "module.exports = {};\n")
    return root


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    """Templates root holding ``1-basic`` and ``2-scaffold`` plus decoys.

    ``2-scaffold`` ships a corrupt ``package.json`` and a backend-config
    side-file; the root also has a hidden directory, a ``node_modules``
    directory, a plain file and the ``CLAUDE.md.template`` docs source.
    """
    root = tmp_path / "templates"
    build_template(root / "1-basic", BASIC_PACKAGE_JSON)
    scaffold = build_template(root / "2-scaffold", "{not json")
    write_file(
        scaffold / "backend-config.json",
        json.dumps({"py": {"scripts": {"build": "py-build"}}}),
    )
    (root / ".git").mkdir()
    (root / "node_modules").mkdir()
    write_file(root / "README.md", "# Templates\n")
    write_file(root / "CLAUDE.md.template", CLAUDE_TEMPLATE)
    return root


@pytest.fixture
def config(templates_root: Path) -> Config:
    return Config(templates_dir=templates_root)


# ---------------------------------------------------------------------------
# Prompt sessions
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_console() -> Console:
    """A Rich console writing to an in-memory buffer."""
    return Console(file=io.StringIO(), width=120, soft_wrap=True)


@pytest.fixture
def make_session(quiet_console: Console) -> Callable[..., PromptSession]:
    """Factory: ``make_session("1", "", "y")`` answers one question per line."""

    def _make(*answers: str) -> PromptSession:
        stream = io.StringIO("".join(f"{a}\n" for a in answers))
        return PromptSession(console=quiet_console, stream=stream)

    return _make


# ---------------------------------------------------------------------------
# Working directory
# ---------------------------------------------------------------------------


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty directory set as the current working directory."""
    path = tmp_path / "work"
    path.mkdir()
    monkeypatch.chdir(path)
    return path
