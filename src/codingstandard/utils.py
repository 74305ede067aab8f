from __future__ import annotations

from pathlib import Path


def display_path(path: Path, root: Path) -> str:
    """
    POSIX-style path for reports, relative to `root` when `path` lives under it.
    """

    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except (ValueError, OSError):
        return path.as_posix()
