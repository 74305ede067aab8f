from __future__ import annotations

import ast
import io
import logging
import os
import tokenize
from collections.abc import Iterable
from pathlib import Path

from codingstandard.engine.context import FileContext
from codingstandard.utils import display_path

logger = logging.getLogger(__name__)

PYTHON_EXTENSIONS = frozenset({".py", ".pyi"})

DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".mypy_cache",
    ".pytest_cache",
    ".tox",
    ".venv",
    "venv",
    "node_modules",
    "dist",
    "build",
    "__pycache__",
}


def discover_files(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into a sorted list of Python sources."""

    found: set[Path] = set()
    for path in paths:
        if path.is_file():
            if path.suffix.lower() in PYTHON_EXTENSIONS:
                found.add(path)
            continue

        for dirpath, dirnames, filenames in os.walk(path, topdown=True):
            dirnames[:] = [d for d in dirnames if d not in DEFAULT_SKIP_DIRS]
            base = Path(dirpath)
            for filename in filenames:
                candidate = base / filename
                if candidate.suffix.lower() in PYTHON_EXTENSIONS:
                    found.add(candidate)

    files = sorted(found)
    logger.debug("Discovered %d Python file(s)", len(files))
    return files


def build_file_context(path: Path, *, project_root: Path | None = None) -> FileContext | None:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return None
    return build_file_context_from_text(path, text, project_root=project_root)


def build_file_context_from_text(path: Path, text: str, *, project_root: Path | None = None) -> FileContext:
    """
    Parse `text` once for every rule.

    Sources that fail to parse or tokenize keep `python_ast` /
    `python_tokens` unset; rules skip such files.
    """

    python_ast: ast.AST | None
    try:
        python_ast = ast.parse(text)
    except (SyntaxError, ValueError) as exc:
        logger.debug("Skipping AST for %s: %s", path, exc)
        python_ast = None

    python_tokens: tuple[tokenize.TokenInfo, ...] | None
    try:
        python_tokens = tuple(tokenize.generate_tokens(io.StringIO(text).readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        logger.debug("Skipping tokens for %s: %s", path, exc)
        python_tokens = None

    return FileContext(
        path=path,
        relative_path=display_path(path, project_root) if project_root is not None else path.as_posix(),
        text=text,
        lines=tuple(text.splitlines()),
        python_ast=python_ast,
        python_tokens=python_tokens,
    )
