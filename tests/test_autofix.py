from __future__ import annotations

import logging
from pathlib import Path

import pytest

from codingstandard.autofix import EditConflictError, apply_edits, fix_file
from codingstandard.config import CodingStandardConfig, RulesConfig
from codingstandard.engine.types import TextEdit


def _edit(line: int, col: int, old: str, new: str) -> TextEdit:
    return TextEdit(rule_id="N01", line=line, col=col, end_col=col + len(old), old_text=old, new_text=new)


def test_apply_edits_without_edits_returns_text() -> None:
    assert apply_edits("x = 1\n", []) == "x = 1\n"


def test_apply_edits_handles_several_edits_on_one_line() -> None:
    text = "foo bar\nbaz\n"
    edits = [_edit(1, 5, "bar", "BARX"), _edit(1, 1, "foo", "FOO"), _edit(2, 1, "baz", "qux")]
    assert apply_edits(text, edits) == "FOO BARX\nqux\n"


def test_apply_edits_preserves_crlf_line_endings() -> None:
    assert apply_edits("class A(Command):\r\n    pass\r\n", [_edit(1, 7, "A", "ACommand")]) == (
        "class ACommand(Command):\r\n    pass\r\n"
    )


def test_apply_edits_rejects_stale_edits() -> None:
    with pytest.raises(EditConflictError):
        apply_edits("class Bar(Command):\n", [_edit(1, 7, "Foo", "FooCommand")])


def test_apply_edits_rejects_overlapping_edits() -> None:
    with pytest.raises(EditConflictError):
        apply_edits("foobar\n", [_edit(1, 1, "foob", "x"), _edit(1, 3, "ob", "y")])


def test_apply_edits_rejects_missing_lines() -> None:
    with pytest.raises(EditConflictError):
        apply_edits("x\n", [_edit(5, 1, "x", "y")])


def test_fix_file_dry_run_reports_diff_without_writing(tmp_path: Path) -> None:
    path = tmp_path / "commands.py"
    path.write_text("class Sync(Command):\n    pass\n", encoding="utf-8")

    result = fix_file(path, CodingStandardConfig(), dry_run=True)

    assert result.changed is True
    assert "-class Sync(Command):" in result.diff
    assert "+class SyncCommand(Command):" in result.diff
    assert [e.new_text for e in result.edits] == ["SyncCommand"]
    assert path.read_text(encoding="utf-8") == "class Sync(Command):\n    pass\n"


def test_fix_file_writes_changes(tmp_path: Path) -> None:
    path = tmp_path / "commands.py"
    path.write_text("class Sync(Command):\n    pass\n", encoding="utf-8")

    result = fix_file(path, CodingStandardConfig(), dry_run=False)

    assert result.changed is True
    assert path.read_text(encoding="utf-8") == "class SyncCommand(Command):\n    pass\n"


def test_fix_file_respects_disabled_fixer(tmp_path: Path) -> None:
    path = tmp_path / "commands.py"
    path.write_text("class Sync(Command):\n    pass\n", encoding="utf-8")
    config = CodingStandardConfig(rules=RulesConfig(disable=("naming",)))

    result = fix_file(path, config, dry_run=False)

    assert result.changed is False
    assert result.diff == ""
    assert result.edits == ()


def test_fix_file_keeps_crlf_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "commands.py"
    path.write_bytes(b"class Sync(Command):\r\n    pass\r\n")

    result = fix_file(path, CodingStandardConfig(), dry_run=False)

    assert result.changed is True
    assert path.read_bytes() == b"class SyncCommand(Command):\r\n    pass\r\n"


def test_fix_file_keeps_utf8_bom(tmp_path: Path) -> None:
    path = tmp_path / "commands.py"
    path.write_bytes(b"\xef\xbb\xbfclass Sync(Command):\n    pass\n")

    fix_file(path, CodingStandardConfig(), dry_run=False)

    assert path.read_bytes() == b"\xef\xbb\xbfclass SyncCommand(Command):\n    pass\n"


def test_fix_file_skips_non_utf8_files(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "commands.py"
    original = b"# caf\xe9\nclass Sync(Command):\n    pass\n"
    path.write_bytes(original)

    with caplog.at_level(logging.WARNING, logger="codingstandard.autofix"):
        result = fix_file(path, CodingStandardConfig(), dry_run=False)

    assert result.changed is False
    assert result.edits == ()
    assert path.read_bytes() == original
    assert "not valid UTF-8" in caplog.text
