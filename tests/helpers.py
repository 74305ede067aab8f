from __future__ import annotations

import textwrap
from pathlib import Path

from codingstandard.engine.context import FileContext
from codingstandard.scanner import build_file_context_from_text


def make_ctx(content: str, *, relpath: str = "example.py") -> FileContext:
    return build_file_context_from_text(Path(relpath), textwrap.dedent(content))
