from __future__ import annotations

import codecs
import difflib
import io
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from codingstandard.config import CodingStandardConfig
from codingstandard.engine.detection import collect_edits
from codingstandard.engine.types import TextEdit
from codingstandard.scanner import build_file_context_from_text

logger = logging.getLogger(__name__)


class EditConflictError(ValueError):
    """Raised when an edit no longer matches the source or overlaps another edit."""


@dataclass(frozen=True, slots=True)
class AutoFixFileResult:
    path: Path
    changed: bool
    diff: str
    edits: tuple[TextEdit, ...]


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """
    Apply single-line edits to `text` and return the updated content.

    Every edit must still see its `old_text` at its range, and no two edits
    may overlap; otherwise `EditConflictError` is raised and nothing changes.
    """

    ordered = sorted(edits, key=lambda e: (e.line, e.col))
    if not ordered:
        return text

    lines = io.StringIO(text).readlines()
    previous: TextEdit | None = None
    for edit in ordered:
        if previous is not None and previous.line == edit.line and edit.col < previous.end_col:
            raise EditConflictError(
                f"Overlapping edits on line {edit.line}: {previous.rule_id} and {edit.rule_id}"
            )
        if not (1 <= edit.line <= len(lines)):
            raise EditConflictError(f"Edit {edit.rule_id} targets missing line {edit.line}")
        current = lines[edit.line - 1][edit.col - 1 : edit.end_col - 1]
        if current != edit.old_text:
            raise EditConflictError(
                f"Edit {edit.rule_id} expected {edit.old_text!r} at {edit.line}:{edit.col}, found {current!r}"
            )
        previous = edit

    # Right to left keeps earlier columns valid.
    for edit in reversed(ordered):
        line = lines[edit.line - 1]
        lines[edit.line - 1] = line[: edit.col - 1] + edit.new_text + line[edit.end_col - 1 :]
    return "".join(lines)


def fix_file(path: Path, config: CodingStandardConfig, *, dry_run: bool) -> AutoFixFileResult:
    """
    Apply fixer edits to `path` and return the result.

    Only the edited tokens change: line endings and a UTF-8 BOM are kept.
    Files that cannot be read or are not valid UTF-8 are left untouched.
    """

    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return AutoFixFileResult(path=path, changed=False, diff="", edits=())

    bom = codecs.BOM_UTF8 if data.startswith(codecs.BOM_UTF8) else b""
    try:
        original = data[len(bom) :].decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Skipping %s: not valid UTF-8 (%s)", path, exc)
        return AutoFixFileResult(path=path, changed=False, diff="", edits=())

    ctx = build_file_context_from_text(path, original)
    edits = collect_edits(config, ctx)
    updated = apply_edits(original, edits)

    changed = original != updated
    if changed and not dry_run:
        path.write_bytes(bom + updated.encode("utf-8"))
        logger.debug("Applied %d edit(s) to %s", len(edits), path)

    return AutoFixFileResult(
        path=path,
        changed=changed,
        diff=_unified_diff(original, updated, path=path),
        edits=tuple(edits),
    )


def _unified_diff(before: str, after: str, *, path: Path) -> str:
    if before == after:
        return ""
    diff = difflib.unified_diff(
        before.splitlines(keepends=False),
        after.splitlines(keepends=False),
        fromfile=str(path),
        tofile=str(path),
        lineterm="",
    )
    return "\n".join(diff)
