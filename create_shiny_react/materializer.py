"""Copy a template tree into a new project directory.

The copy is depth-first and non-transactional: if it fails partway the
target is left partially populated.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from create_shiny_react.config import BACKEND_DIRECTORIES, DEFAULT_SKIP_NAMES, Backend
from create_shiny_react.errors import MaterializationError


def backend_skip_names(backend: Backend) -> frozenset[str]:
    """Backend subtrees to leave out for *backend*.

    ``r`` skips ``py``, ``py`` skips ``r``, ``both`` skips nothing.
    """
    return frozenset(BACKEND_DIRECTORIES - set(backend.directories))


def copy_tree(
    src: str | Path,
    dest: str | Path,
    skip_names: Iterable[str] = (),
    *,
    static_skip_names: Iterable[str] = DEFAULT_SKIP_NAMES,
) -> int:
    """Recursively copy *src* to *dest*, returning the number of files copied.

    Entries named in *static_skip_names* (build output, dependency caches) or
    *skip_names* (unselected backends) are skipped at every level.

    Raises:
        MaterializationError: If *src*, or any directory below it, no longer
            exists when it is reached, or an entry cannot be read or written.
    """
    skip = frozenset(skip_names) | frozenset(static_skip_names)
    return _copy(Path(src), Path(dest), skip)


def _copy(src: Path, dest: Path, skip: frozenset[str]) -> int:
    if not src.exists():
        raise MaterializationError(src)

    try:
        if not src.is_dir():
            shutil.copy(src, dest)
            return 1

        dest.mkdir(parents=True, exist_ok=True)
        entries = sorted(src.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise MaterializationError(src, exc.strerror or str(exc)) from exc

    copied = 0
    for entry in entries:
        if entry.name in skip:
            continue
        copied += _copy(entry, dest / entry.name, skip)
    return copied
