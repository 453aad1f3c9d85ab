"""create-shiny-react-app pipeline orchestrator.

Runs the scaffolding steps strictly in order:

1. Discover templates under the templates root.
2. Ask for template, backend, package manager and docs inclusion.
3. Copy the chosen template into the new project directory.
4. Patch the project's ``package.json``.
5. Optionally inject documentation files.
6. Print next steps.

Usage::

    create-shiny-react-app my-app
    python -m create_shiny_react my-app --templates-dir ./templates
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.markup import escape

from create_shiny_react.config import Backend, Config, PackageManager
from create_shiny_react.docs import inject_docs
from create_shiny_react.errors import ScaffoldError, TargetExistsError
from create_shiny_react.manifest import patch_manifest
from create_shiny_react.materializer import backend_skip_names, copy_tree
from create_shiny_react.registry import discover_templates
from create_shiny_react.selector import PromptSession, Selection, select
from create_shiny_react.utils import console, print_error, print_success, print_summary_table

PROG = "create-shiny-react-app"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """Creates one project from a template.

    Attributes:
        config: Global configuration.
        session: Prompt session used for every question of the run.
    """

    def __init__(self, config: Config, session: PromptSession) -> None:
        self.config = config
        self.session = session

    def run(self, app_name: str) -> Path:
        """Scaffold *app_name* and return the created project directory.

        Raises:
            TargetExistsError: If the target directory already exists.
            RegistryError: If the templates root is missing or empty.
            SelectionError: If input ends before every question is answered.
            MaterializationError: If the template disappears mid-copy.
        """
        target = Path(app_name).resolve()
        if target.exists():
            raise TargetExistsError(app_name)

        templates_root = self.config.resolve_templates_dir()
        templates = discover_templates(templates_root, self.config.registry_skip_names)

        console.print(f"Creating new shiny-react app: [bold]{escape(app_name)}[/bold]")
        console.print()

        selection = select(self.session, templates, self.config)
        self._print_plan(selection, target)

        # Re-checked: the directory may have appeared while we were prompting.
        if target.exists():
            raise TargetExistsError(app_name)

        copy_tree(
            selection.template.path,
            target,
            backend_skip_names(selection.backend),
            static_skip_names=self.config.skip_names,
        )
        patch_manifest(target, app_name, selection.backend.id, self.config)

        if selection.include_docs:
            inject_docs(
                templates_root,
                target,
                app_name,
                context={
                    "template_id": selection.template.id,
                    "template_name": selection.template.name,
                    "backend_id": selection.backend.id,
                    "backend_label": selection.backend.label,
                },
                docs=self.config.docs,
            )

        self._print_next_steps(app_name, selection)
        return target

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _print_plan(self, selection: Selection, target: Path) -> None:
        summary = {
            "Template": f"{selection.template.name} ({selection.template.id})",
            "Backend": selection.backend.label,
        }
        if selection.package_manager is not None:
            summary["Package manager"] = selection.package_manager.label
        summary["Target"] = str(target)
        if selection.include_docs:
            summary["Including"] = ", ".join(doc.target for doc in self.config.docs)
        print_summary_table(summary, title="New app")

    def _print_next_steps(self, app_name: str, selection: Selection) -> None:
        print_success("App created successfully!")
        console.print()
        console.print("Next steps:")
        for step in next_steps(app_name):
            console.print(f"  {step}", markup=False)

        console.print()
        console.print("Then in another terminal:")
        for line in backend_instructions(
            selection.backend, selection.package_manager, self.config.port
        ):
            console.print(line, markup=False)

        console.print()
        console.print(f"Open http://localhost:{self.config.port} in your browser")

        if "chat" in selection.template.id:
            console.print()
            console.print("Note: The AI chat template requires LLM API keys.")
            console.print("   See the README.md for setup instructions.")


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


def next_steps(app_name: str) -> list[str]:
    return [
        f"cd {app_name}",
        "npm install",
        "npm run watch    # Start development with automatic rebuilds of JavaScript and CSS files",
    ]


def backend_instructions(
    backend: Backend,
    package_manager: PackageManager | None = None,
    port: int = 8000,
) -> list[str]:
    """Commands for starting the generated app's backend server(s)."""
    lines: list[str] = []

    if backend.includes_r:
        lines.append("  # For R backend:")
        lines.append(
            f"  R -e \"options(shiny.autoreload = TRUE); shiny::runApp('r/app.R', port={port})\""
        )

    if backend.includes_python:
        if lines:
            lines.append("")
        prefix = package_manager.run_prefix if package_manager else ""
        lines.append("  # For Python backend:")
        if package_manager is not None:
            lines.append(f"  {package_manager.install_command}")
        lines.append(f"  {prefix}shiny run py/app.py --port {port} --reload")

    return lines


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _print_usage() -> None:
    console.print(f"Usage: {PROG} <app-name>", markup=False)
    console.print()
    console.print("Creates a new shiny-react application with your choice of template.")
    console.print()
    console.print("Example:")
    console.print(f"  {PROG} my-app")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-shiny-react-app``."""
    import argparse

    def _usage_error(message: str) -> None:
        _print_usage()
        sys.exit(1)

    parser = argparse.ArgumentParser(prog=PROG, add_help=False)
    parser.add_argument("app_name", nargs="*")
    parser.add_argument("--templates-dir", default=None)
    parser.add_argument("-h", "--help", action="store_true")
    # Malformed options get the same usage text and status as a bad app name.
    parser.error = _usage_error  # type: ignore[method-assign]

    args, unknown = parser.parse_known_args(argv)
    if args.help:
        _print_usage()
        sys.exit(0)
    if unknown or len(args.app_name) != 1:
        _print_usage()
        sys.exit(1)

    try:
        config = Config.from_env(
            templates_dir=Path(args.templates_dir) if args.templates_dir else None,
        )
        with PromptSession() as session:
            ScaffoldPipeline(config, session).run(args.app_name[0])
    except ScaffoldError as exc:
        print_error(str(exc))
        sys.exit(1)
    except OSError as exc:
        print_error(f"Error creating app: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
