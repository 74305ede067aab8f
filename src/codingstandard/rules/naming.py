from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from codingstandard.engine.context import FileContext
from codingstandard.engine.suffixes import (
    DEFAULT_SUFFIX_RULES,
    SuffixRule,
    class_declarations,
    class_name_edit,
)
from codingstandard.engine.types import TextEdit, Violation
from codingstandard.rules.base import BaseFixer, BaseRule, RuleMeta, loc_from_line

if TYPE_CHECKING:
    from codingstandard.config import CodingStandardConfig


@dataclass(frozen=True, slots=True)
class ClassNameSuffixByParentFixer(BaseFixer):
    meta = RuleMeta(
        rule_id="N01",
        title="Class name suffix by parent",
        description="Class should have suffix by parent class/interface (e.g. `class Foo(Command)` -> `FooCommand`).",
        default_severity="warn",
        fixable=True,
        risky=True,
    )

    suffix_rules: tuple[SuffixRule, ...] = DEFAULT_SUFFIX_RULES

    def configure(self, config: CodingStandardConfig) -> ClassNameSuffixByParentFixer:
        return replace(self, suffix_rules=config.class_suffix.rules)

    def check_file(self, ctx: FileContext) -> list[Violation]:
        violations: list[Violation] = []
        for edit in self.fix_file(ctx):
            violations.append(
                self._violation(
                    message=f'Class "{edit.old_text}" should be named "{edit.new_text}"',
                    suggestion=f"Rename the class to `{edit.new_text}` (run `codingstandard fix`).",
                    location=loc_from_line(ctx, line=edit.line, col=edit.col, end_line=edit.line, end_col=edit.end_col),
                )
            )
        return violations

    def fix_file(self, ctx: FileContext) -> list[TextEdit]:
        if ctx.python_ast is None:
            return []

        edits: list[TextEdit] = []
        for declaration in class_declarations(ctx.python_ast, ctx.python_tokens):
            edit = class_name_edit(declaration, self.suffix_rules, rule_id=self.meta.rule_id)
            if edit is not None:
                edits.append(edit)
        return sorted(edits, key=lambda e: (e.line, e.col))


def builtin_naming_rules() -> list[BaseRule]:
    return [ClassNameSuffixByParentFixer()]
