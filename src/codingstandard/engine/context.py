from __future__ import annotations

import ast
import tokenize
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class FileContext:
    path: Path
    relative_path: str
    text: str
    lines: tuple[str, ...]
    python_ast: ast.AST | None = None
    python_tokens: tuple[tokenize.TokenInfo, ...] | None = None
