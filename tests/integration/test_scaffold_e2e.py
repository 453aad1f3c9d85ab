"""Integration tests for the full create-shiny-react-app run.

These tests drive the real CLI against a template tree built in ``tmp_path``,
both in-process through ``main()`` and as a subprocess through
``python -m create_shiny_react``, and verify the generated project on disk.

No network access or Node/R/Python toolchains for the generated app are
required.
"""

from __future__ import annotations

import io
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from create_shiny_react.pipeline import main


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def _run_cli(args: list[str], answers: str, cwd: Path) -> subprocess.CompletedProcess:
    env = {**os.environ, "PYTHONIOENCODING": "utf-8"}
    env.pop("CSR_TEMPLATES_DIR", None)
    return subprocess.run(
        [sys.executable, "-m", "create_shiny_react", *args],
        input=answers,
        capture_output=True,
        text=True,
        cwd=cwd,
        env=env,
        timeout=60,
    )


def _run_main(
    monkeypatch: pytest.MonkeyPatch, templates_root: Path, answers: str, name: str = "demo"
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(answers))
    main([name, "--templates-dir", str(templates_root)])


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestScaffoldScenarios:
    """End-to-end scenarios against a two-template root."""

    def test_basic_template_python_backend(
        self, templates_root: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        _run_main(monkeypatch, templates_root, "1\n2\n\n\n")
        demo = workdir / "demo"

        assert (demo / "py" / "app.py").is_file()
        assert (demo / "srcts" / "main.tsx").is_file()
        assert not (demo / "r").exists()
        assert not (demo / "py" / "www").exists()

        manifest = json.loads((demo / "package.json").read_text(encoding="utf-8"))
        assert manifest["name"] == "demo"
        assert manifest["version"] == "1.0.0"
        assert manifest["dependencies"]["@posit/shiny-react"] == "^0.0.6"
        assert "py/www/main.js" in manifest["scripts"]["build"]

    def test_existing_target_is_untouched(
        self, templates_root: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        demo = workdir / "demo"
        (demo / "sub").mkdir(parents=True)
        (demo / "sub" / "notes.txt").write_text("keep me", encoding="utf-8")
        before = _snapshot(demo)

        with pytest.raises(SystemExit) as excinfo:
            _run_main(monkeypatch, templates_root, "1\n2\n\n\n")

        assert excinfo.value.code == 1
        assert _snapshot(demo) == before

    def test_docs_opt_in_substitutes_project_name(
        self, templates_root: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        _run_main(monkeypatch, templates_root, "1\n1\ny\n", name="my-shiny-app")
        content = (workdir / "my-shiny-app" / "CLAUDE.md").read_text(encoding="utf-8")
        assert content.count("my-shiny-app") == 2
        assert "hello-world-app" not in content

    def test_docs_source_missing_still_succeeds(
        self, templates_root: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys
    ):
        (templates_root / "CLAUDE.md.template").unlink()
        _run_main(monkeypatch, templates_root, "1\n1\ny\n")
        assert (workdir / "demo" / "package.json").is_file()
        assert not (workdir / "demo" / "CLAUDE.md").exists()
        assert "CLAUDE.md.template not found" in capsys.readouterr().out

    def test_invalid_answers_reprompt(
        self, templates_root: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys
    ):
        _run_main(monkeypatch, templates_root, "9\n1\nx\n1\nmaybe\nn\n")
        assert (workdir / "demo" / "r" / "app.R").is_file()
        assert not (workdir / "demo" / "py").exists()
        assert "Invalid choice" in capsys.readouterr().out

    def test_nested_target_path(
        self, templates_root: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        _run_main(monkeypatch, templates_root, "1\n1\nn\n", name="apps/demo")
        manifest = json.loads(
            (workdir / "apps" / "demo" / "package.json").read_text(encoding="utf-8")
        )
        assert manifest["name"] == "apps/demo"


@pytest.mark.integration
class TestCliSubprocess:
    """Run the installed module as a separate process."""

    def test_success_exit_code(self, templates_root: Path, workdir: Path):
        result = _run_cli(["demo", "--templates-dir", str(templates_root)], "1\n2\n1\nn\n", workdir)
        assert result.returncode == 0, result.stderr
        assert "App created successfully!" in result.stdout
        assert (workdir / "demo" / "py" / "app.py").is_file()
        assert not (workdir / "demo" / "r").exists()

    def test_usage_exit_code(self, workdir: Path):
        result = _run_cli([], "", workdir)
        assert result.returncode == 1
        assert "Usage: create-shiny-react-app <app-name>" in result.stdout

    def test_existing_target_exit_code(self, templates_root: Path, workdir: Path):
        (workdir / "demo").mkdir()
        result = _run_cli(["demo", "--templates-dir", str(templates_root)], "", workdir)
        assert result.returncode == 1
        assert "already exists" in result.stderr
        assert list((workdir / "demo").iterdir()) == []

    def test_missing_templates_exit_code(self, tmp_path: Path, workdir: Path):
        result = _run_cli(["demo", "--templates-dir", str(tmp_path / "nope")], "", workdir)
        assert result.returncode == 1
        assert "Templates directory not found" in result.stderr
        assert not (workdir / "demo").exists()
