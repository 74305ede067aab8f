from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from codingstandard import __version__
from codingstandard.engine.types import Violation
from codingstandard.utils import display_path

_SEVERITY_ICON = {"error": "✖", "warn": "⚠", "info": "ℹ"}
_SEVERITY_STYLE = {"error": "bold red", "warn": "yellow", "info": "dim"}


def render_terminal(
    violations: Sequence[Violation],
    *,
    files_checked: int,
    project_root: Path,
    console: Console,
) -> None:
    header = Text()
    header.append("codingstandard ", style="bold")
    header.append(f"v{__version__}", style="dim")
    console.print(Panel(header, subtitle=f"Checked {files_checked} files", border_style="cyan"))

    by_file: dict[str, list[Violation]] = defaultdict(list)
    for v in violations:
        path = v.location.path if v.location is not None else None
        key = display_path(path, project_root) if path is not None else "<unknown>"
        by_file[key].append(v)

    for file_path in sorted(by_file):
        console.print(Text(file_path, style="bold"))
        for v in sorted(by_file[file_path], key=_sort_key):
            _print_violation(console, v)
        console.print()

    console.print(Text("─" * 60, style="dim"))
    if violations:
        console.print(Text(f"Found {len(violations)} problem(s)", style="bold red"))
    else:
        console.print(Text("No problems found", style="bold green"))


def _print_violation(console: Console, v: Violation) -> None:
    icon = _SEVERITY_ICON.get(v.severity, "•")
    style = _SEVERITY_STYLE.get(v.severity, "")

    loc = ""
    if v.location is not None and v.location.start_line is not None:
        loc = f"{v.location.start_line}"
        if v.location.start_col is not None:
            loc += f":{v.location.start_col}"

    line = Text()
    line.append(f"  {icon} ", style=style)
    line.append(v.rule_id, style="bold")
    if loc:
        line.append(f"  ({loc})", style="dim")
    line.append(f"  {v.message}")
    console.print(line)

    if v.suggestion:
        console.print(f"     → {v.suggestion}", style="dim")


def _sort_key(v: Violation) -> tuple[int, int, str]:
    line = v.location.start_line if v.location and v.location.start_line else 10**9
    col = v.location.start_col if v.location and v.location.start_col else 0
    return line, col, v.rule_id
