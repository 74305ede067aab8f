from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codingstandard.engine.context import FileContext
from codingstandard.engine.types import Location, Severity, TextEdit, Violation

if TYPE_CHECKING:
    from codingstandard.config import CodingStandardConfig


@dataclass(frozen=True, slots=True)
class RuleMeta:
    rule_id: str
    title: str
    description: str
    default_severity: Severity
    fixable: bool = False
    risky: bool = False


class BaseRule(ABC):
    """A plugin that reports issues without changing code."""

    meta: RuleMeta

    def configure(self, config: CodingStandardConfig) -> BaseRule:
        """Return a copy of this rule bound to `config`; rules without options return self."""

        return self

    def check_file(self, ctx: FileContext) -> list[Violation]:
        return []

    def _violation(
        self,
        *,
        message: str,
        suggestion: str | None = None,
        location: Location | None = None,
        severity: Severity | None = None,
    ) -> Violation:
        return Violation(
            rule_id=self.meta.rule_id,
            severity=severity or self.meta.default_severity,
            message=message,
            suggestion=suggestion,
            location=location,
        )


class BaseFixer(BaseRule):
    """A plugin that reports issues and proposes edits for them."""

    @abstractmethod
    def fix_file(self, ctx: FileContext) -> list[TextEdit]:
        raise NotImplementedError


def loc_from_line(
    ctx: FileContext, *, line: int, col: int | None = 1, end_line: int | None = None, end_col: int | None = None
) -> Location:
    return Location(
        path=ctx.path,
        start_line=line,
        start_col=col,
        end_line=end_line,
        end_col=end_col,
    )
