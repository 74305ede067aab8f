from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from codingstandard import __version__
from codingstandard.autofix import EditConflictError, fix_file
from codingstandard.config import CodingStandardConfig, ConfigError, compute_enabled_rule_ids, find_project_root, load_config
from codingstandard.engine.detection import detect
from codingstandard.logging_utils import configure_logging
from codingstandard.reporters.json_reporter import render_json
from codingstandard.reporters.terminal import render_terminal
from codingstandard.rules.plugins import PluginLoadError, load_plugin_rules
from codingstandard.rules.registry import rule_ids, rule_meta_by_id, set_extra_rules
from codingstandard.scanner import build_file_context, discover_files

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="codingstandard: cognitive complexity and class naming rules for Python code.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

_PathsArgument = Annotated[
    list[Path],
    typer.Argument(exists=True, file_okay=True, dir_okay=True, resolve_path=True, help="Files or directories."),
]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr).")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors.")] = False,
) -> None:
    """codingstandard CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)


def _prepare(start: Path) -> tuple[Path, CodingStandardConfig]:
    """Load config + plugin rules for the project containing `start`, or exit with code 2."""

    project_root = find_project_root(start)
    try:
        config = load_config(project_root)
        plugin_rules = load_plugin_rules(config.plugins)
        set_extra_rules(plugin_rules)
    except (ConfigError, PluginLoadError, RuntimeError) as exc:
        err_console.print(f"Configuration error: {exc}")
        raise typer.Exit(code=2) from exc
    return project_root, config


@app.command()
def check(
    paths: _PathsArgument,
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    Report rule violations. Exits with code 1 when anything is found.
    """

    normalized = output_format.strip().lower()
    if normalized not in {"terminal", "json"}:
        raise typer.BadParameter("Unsupported format. Use: terminal, json.")

    project_root, config = _prepare(paths[0])
    files = discover_files(paths)
    contexts = [ctx for ctx in (build_file_context(p, project_root=project_root) for p in files) if ctx is not None]
    violations = detect(config, contexts)
    logger.debug("Found %d violation(s) in %d file(s)", len(violations), len(contexts))

    if normalized == "json":
        typer.echo(render_json(violations, files_checked=len(contexts), project_root=project_root))
    else:
        render_terminal(violations, files_checked=len(contexts), project_root=project_root, console=console)

    if violations:
        raise typer.Exit(code=1)


@app.command()
def fix(
    paths: _PathsArgument,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Don't write changes; only print a unified diff."),
    ] = False,
) -> None:
    """
    Apply fixer edits (class name suffixes) in place.
    """

    _project_root, config = _prepare(paths[0])
    changed = 0
    for path in discover_files(paths):
        try:
            result = fix_file(path, config, dry_run=dry_run)
        except EditConflictError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            continue
        if not result.changed:
            continue
        changed += 1
        if dry_run:
            typer.echo(result.diff)

    if not changed:
        console.print("No changes needed.")
    elif not dry_run:
        console.print(f"Fixed {changed} file(s).")


@app.command()
def rules(
    path: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=False, dir_okay=True, resolve_path=True, help="Project directory."),
    ] = Path("."),
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    List available rules (built-in + plugin rules) and whether the config enables them.
    """

    _project_root, config = _prepare(path)
    metas = rule_meta_by_id()
    enabled_ids = compute_enabled_rule_ids(config, available_rule_ids=rule_ids())

    rows = [
        {
            "rule_id": meta.rule_id,
            "enabled": meta.rule_id in enabled_ids,
            "title": meta.title,
            "description": meta.description,
            "default_severity": meta.default_severity,
            "fixable": meta.fixable,
            "risky": meta.risky,
        }
        for meta in metas.values()
    ]

    normalized = output_format.strip().lower()
    if normalized == "json":
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return
    if normalized != "terminal":
        raise typer.BadParameter("Unsupported format. Use: terminal, json.")

    table = Table(title="codingstandard rules")
    table.add_column("ID", style="bold")
    table.add_column("Enabled", justify="center")
    table.add_column("Severity")
    table.add_column("Fixable", justify="center")
    table.add_column("Title")
    for row in rows:
        table.add_row(
            str(row["rule_id"]),
            "yes" if row["enabled"] else "no",
            str(row["default_severity"]),
            "yes" if row["fixable"] else "no",
            str(row["title"]),
        )
    console.print(table)
