from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Severity = Literal["info", "warn", "error"]


@dataclass(frozen=True, slots=True)
class Location:
    path: Path | None = None
    start_line: int | None = None  # 1-based
    start_col: int | None = None  # 1-based
    end_line: int | None = None  # 1-based
    end_col: int | None = None  # 1-based


@dataclass(frozen=True, slots=True)
class Violation:
    rule_id: str
    severity: Severity
    message: str
    suggestion: str | None = None
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class TextEdit:
    """
    Replacement of a single-line source range produced by a fixer.

    Positions are 1-based; `end_col` is exclusive. `old_text` is the text the
    fixer saw at that range and is checked again before the edit is applied.
    """

    rule_id: str
    line: int
    col: int
    end_col: int
    old_text: str
    new_text: str
