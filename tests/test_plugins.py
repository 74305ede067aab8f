from __future__ import annotations

from pathlib import Path

import pytest

from codingstandard.config import CodingStandardConfig
from codingstandard.engine.detection import detect
from codingstandard.rules.plugins import PluginLoadError, load_plugin_rules
from codingstandard.rules.registry import set_extra_rules
from codingstandard.scanner import build_file_context_from_text

_PLUGIN_SOURCE = '''
from __future__ import annotations

from dataclasses import dataclass

from codingstandard.engine.context import FileContext
from codingstandard.engine.types import Violation
from codingstandard.rules.base import BaseRule, RuleMeta, loc_from_line


@dataclass(frozen=True, slots=True)
class X99PluginRule(BaseRule):
    meta = RuleMeta(
        rule_id="X99",
        title="Plugin rule",
        description="A test plugin rule.",
        default_severity="warn",
    )

    def check_file(self, ctx: FileContext) -> list[Violation]:
        return [self._violation(message="Plugin hit", location=loc_from_line(ctx, line=1))]


def codingstandard_rules() -> list[BaseRule]:
    return [X99PluginRule()]
'''


def test_plugin_rules_are_loaded_and_detected(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "my_plugin.py").write_text(_PLUGIN_SOURCE.lstrip(), encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    rules = load_plugin_rules(("my_plugin", "  ", "my_plugin:codingstandard_rules"))
    assert [r.meta.rule_id for r in rules] == ["X99", "X99"]

    set_extra_rules(rules[:1])
    ctx = build_file_context_from_text(Path("example.py"), "x = 1\n")
    violations = detect(CodingStandardConfig(), [ctx])
    assert [v.rule_id for v in violations] == ["X99"]


def test_load_plugin_rules_missing_module_raises() -> None:
    with pytest.raises(PluginLoadError):
        load_plugin_rules(("this_module_should_not_exist_12345",))


def test_load_plugin_rules_missing_exports_raises(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "no_exports.py").write_text("x = 1\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(PluginLoadError):
        load_plugin_rules(("no_exports",))


def test_load_plugin_rules_missing_attr_raises(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "simple_plugin.py").write_text("RULES = []\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    assert load_plugin_rules(("simple_plugin",)) == []
    with pytest.raises(PluginLoadError):
        load_plugin_rules(("simple_plugin:missing_attr",))


def test_load_plugin_rules_rejects_non_rule_items(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "bad_rules.py").write_text("RULES = [1, 2, 3]\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(PluginLoadError):
        load_plugin_rules(("bad_rules",))


def test_load_plugin_rules_rejects_unsupported_export_type(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "bad_export.py").write_text("codingstandard_rules = 123\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(PluginLoadError):
        load_plugin_rules(("bad_export",))
