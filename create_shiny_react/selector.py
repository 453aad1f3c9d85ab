"""Interactive selection of template, backend, package manager and docs.

All questions go through a single ``PromptSession`` owned by the caller and
closed when the run ends.  Every question accepts empty input as its stated
default; invalid answers re-prompt instead of terminating the process.
"""

from __future__ import annotations

from typing import TextIO

from pydantic import BaseModel, ConfigDict
from rich.console import Console

from create_shiny_react.config import PACKAGE_MANAGERS, Backend, Config, PackageManager
from create_shiny_react.errors import SelectionError
from create_shiny_react.registry import TemplateDescriptor
from create_shiny_react.utils import console as default_console

YES_ANSWERS = frozenset({"y", "yes"})
NO_ANSWERS = frozenset({"n", "no"})


# ---------------------------------------------------------------------------
# Prompt session
# ---------------------------------------------------------------------------


class PromptSession:
    """Line-oriented prompt session over a Rich console.

    Reads from *stream* when given, otherwise from the terminal.  Use it as a
    context manager so it is closed on every exit path::

        with PromptSession() as session:
            index = session.ask_index("Choose a template (1-3) [1]: ", 3, 1)
    """

    def __init__(self, console: Console | None = None, stream: TextIO | None = None) -> None:
        self.console = console or default_console
        self._stream = stream
        self._closed = False

    def __enter__(self) -> "PromptSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    # -- Questions ---------------------------------------------------------

    def ask(self, prompt: str, default: str = "") -> str:
        """Ask one question and return the stripped answer, or *default*."""
        if self._closed:
            raise SelectionError("Prompt session is closed")
        try:
            raw = self.console.input(prompt, markup=False, stream=self._stream)
        except EOFError:
            raise SelectionError("Input ended before a choice was made") from None
        if self._stream is not None and raw == "":
            raise SelectionError("Input ended before a choice was made")
        return raw.strip() or default

    def ask_index(self, prompt: str, count: int, default: int) -> int:
        """Ask for a 1-based choice in ``1..count``; returns it 0-based."""
        while True:
            answer = self.ask(prompt, str(default))
            try:
                choice = int(answer)
            except ValueError:
                choice = 0
            if 1 <= choice <= count:
                return choice - 1
            self.console.print(
                f"[red]Invalid choice. Please select a number between 1 and {count}.[/red]"
            )

    def ask_yes_no(self, prompt: str, default: bool = False) -> bool:
        """Ask a yes/no question accepting ``y``/``yes``/``n``/``no``."""
        while True:
            answer = self.ask(prompt, "").lower()
            if not answer:
                return default
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False
            self.console.print("[red]Please answer y or n.[/red]")


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class Selection(BaseModel):
    """Everything the user chose for one run."""

    model_config = ConfigDict(frozen=True)

    template: TemplateDescriptor
    backend: Backend
    package_manager: PackageManager | None
    include_docs: bool


def show_templates(templates: list[TemplateDescriptor], console: Console) -> None:
    console.print("Available templates:")
    console.print()
    for index, template in enumerate(templates, start=1):
        console.print(f"  {index}. {template.name}", markup=False)
        console.print(f"     {template.description}", markup=False)
        console.print()


def show_backends(backends: list[Backend], console: Console) -> None:
    console.print("Available backends:")
    console.print()
    for index, backend in enumerate(backends, start=1):
        console.print(f"  {index}. {backend.label}", markup=False)
        console.print()


def select(
    session: PromptSession,
    templates: list[TemplateDescriptor],
    config: Config,
) -> Selection:
    """Run the question sequence: template, backend, package manager, docs.

    The package-manager question is only asked when the chosen backend
    includes Python.
    """
    out = session.console

    show_templates(templates, out)
    count = len(templates)
    template = templates[session.ask_index(f"Choose a template (1-{count}) [1]: ", count, 1)]
    out.print()

    backends = config.backends
    show_backends(backends, out)
    default_backend = config.default_backend_index
    backend = backends[
        session.ask_index(
            f"Choose a backend (1-{len(backends)}) [{default_backend}]: ",
            len(backends),
            default_backend,
        )
    ]
    out.print()

    package_manager: PackageManager | None = None
    if backend.includes_python:
        options = " / ".join(
            f"{i}. {pm.label}" for i, pm in enumerate(PACKAGE_MANAGERS, start=1)
        )
        out.print(f"Python package managers: {options}", markup=False)
        package_manager = PACKAGE_MANAGERS[
            session.ask_index(
                f"Choose a package manager (1-{len(PACKAGE_MANAGERS)}) [1]: ",
                len(PACKAGE_MANAGERS),
                1,
            )
        ]
        out.print()

    include_docs = session.ask_yes_no("Include CLAUDE.md for LLM assistance? (y/N): ", False)
    out.print()

    return Selection(
        template=template,
        backend=backend,
        package_manager=package_manager,
        include_docs=include_docs,
    )
