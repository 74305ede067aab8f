from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from codingstandard import __version__
from codingstandard.cli import app

_DIRTY = "class Sync(Command):\n    pass\n"


def _project(tmp_path: Path, config: str = "") -> Path:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n' + config, encoding="utf-8")
    return tmp_path


def test_version_flag_prints_version() -> None:
    res = CliRunner().invoke(app, ["--version"])
    assert res.exit_code == 0
    assert __version__ in res.output


def test_check_json_reports_violations_and_exits_one(tmp_path: Path) -> None:
    root = _project(tmp_path)
    (root / "commands.py").write_text(_DIRTY, encoding="utf-8")

    res = CliRunner().invoke(app, ["check", str(root), "--format", "json"])
    assert res.exit_code == 1
    payload = json.loads(res.output)
    assert payload["files_checked"] == 1
    assert [(v["rule_id"], v["path"], v["line"]) for v in payload["violations"]] == [("N01", "commands.py", 1)]


def test_check_clean_project_exits_zero(tmp_path: Path) -> None:
    root = _project(tmp_path)
    (root / "clean.py").write_text("def f(x):\n    return x\n", encoding="utf-8")

    res = CliRunner().invoke(app, ["check", str(root)])
    assert res.exit_code == 0
    assert "No problems found" in res.output


def test_check_uses_configured_maximum(tmp_path: Path) -> None:
    root = _project(
        tmp_path,
        "\n[tool.codingstandard.cognitive-complexity]\nmaximum-cognitive-complexity = 0\n",
    )
    (root / "logic.py").write_text("def f(x):\n    if x:\n        return 1\n    return 0\n", encoding="utf-8")

    res = CliRunner().invoke(app, ["check", str(root), "--format", "json"])
    assert res.exit_code == 1
    (violation,) = json.loads(res.output)["violations"]
    assert violation["rule_id"] == "C01"
    assert violation["message"] == 'Cognitive complexity for "f()" is 1, keep it under 0'


def test_check_rejects_unknown_format(tmp_path: Path) -> None:
    root = _project(tmp_path)
    res = CliRunner().invoke(app, ["check", str(root), "--format", "xml"])
    assert res.exit_code != 0


def test_check_invalid_config_exits_two(tmp_path: Path) -> None:
    root = _project(
        tmp_path,
        "\n[tool.codingstandard.cognitive-complexity]\nmaximum-cognitive-complexity = \"eight\"\n",
    )
    (root / "clean.py").write_text("x = 1\n", encoding="utf-8")

    res = CliRunner().invoke(app, ["check", str(root)])
    assert res.exit_code == 2


def test_check_missing_plugin_exits_two(tmp_path: Path) -> None:
    root = _project(tmp_path, '\n[tool.codingstandard]\nplugins = ["codingstandard_missing_plugin_xyz"]\n')
    res = CliRunner().invoke(app, ["check", str(root)])
    assert res.exit_code == 2


def test_fix_dry_run_prints_diff_without_writing(tmp_path: Path) -> None:
    root = _project(tmp_path)
    path = root / "commands.py"
    path.write_text(_DIRTY, encoding="utf-8")

    res = CliRunner().invoke(app, ["fix", str(root), "--dry-run"])
    assert res.exit_code == 0
    assert "+class SyncCommand(Command):" in res.output
    assert path.read_text(encoding="utf-8") == _DIRTY


def test_fix_writes_files(tmp_path: Path) -> None:
    root = _project(tmp_path)
    path = root / "commands.py"
    path.write_text(_DIRTY, encoding="utf-8")

    res = CliRunner().invoke(app, ["fix", str(root)])
    assert res.exit_code == 0
    assert "Fixed 1 file(s)." in res.output
    assert path.read_text(encoding="utf-8") == "class SyncCommand(Command):\n    pass\n"

    again = CliRunner().invoke(app, ["fix", str(root)])
    assert again.exit_code == 0
    assert "No changes needed." in again.output


def test_rules_json_lists_builtin_rules(tmp_path: Path) -> None:
    root = _project(tmp_path, '\n[tool.codingstandard.rules]\ndisable = ["complexity"]\n')

    res = CliRunner().invoke(app, ["rules", str(root), "--format", "json"])
    assert res.exit_code == 0
    rows = {row["rule_id"]: row for row in json.loads(res.output)}
    assert set(rows) == {"C01", "N01"}
    assert rows["C01"]["enabled"] is False
    assert rows["N01"]["enabled"] is True
    assert rows["N01"]["fixable"] is True
    assert rows["N01"]["risky"] is True


def test_rules_terminal_renders_table(tmp_path: Path) -> None:
    root = _project(tmp_path)
    res = CliRunner().invoke(app, ["rules", str(root)])
    assert res.exit_code == 0
    assert "C01" in res.output
    assert "N01" in res.output


def test_verbose_and_quiet_are_mutually_exclusive(tmp_path: Path) -> None:
    res = CliRunner().invoke(app, ["--verbose", "--quiet", "check", str(tmp_path)])
    assert res.exit_code != 0


def test_rules_json_lists_plugin_rules(tmp_path: Path, monkeypatch) -> None:
    plugin_dir = tmp_path / "plugins"
    plugin_dir.mkdir()
    (plugin_dir / "cs_listed_plugin.py").write_text(
        "from dataclasses import dataclass\n"
        "\n"
        "from codingstandard.rules.base import BaseRule, RuleMeta\n"
        "\n"
        "\n"
        "@dataclass(frozen=True, slots=True)\n"
        "class ListedRule(BaseRule):\n"
        '    meta = RuleMeta(rule_id="P01", title="Listed", description="listed", default_severity="info")\n'
        "\n"
        "\n"
        "RULES = [ListedRule()]\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(plugin_dir))
    root = _project(tmp_path, '\n[tool.codingstandard]\nplugins = ["cs_listed_plugin"]\n')

    res = CliRunner().invoke(app, ["rules", str(root), "--format", "json"])
    assert res.exit_code == 0
    rows = json.loads(res.output)
    assert [row["rule_id"] for row in rows] == ["C01", "N01", "P01"]
    assert rows[2]["enabled"] is True
