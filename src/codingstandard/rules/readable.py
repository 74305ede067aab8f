from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from codingstandard.config import DEFAULT_MAXIMUM_COGNITIVE_COMPLEXITY
from codingstandard.engine.complexity import analyze_function_like, function_like_name, iter_function_likes
from codingstandard.engine.context import FileContext
from codingstandard.engine.types import Violation
from codingstandard.rules.base import BaseRule, RuleMeta, loc_from_line

if TYPE_CHECKING:
    from codingstandard.config import CodingStandardConfig


@dataclass(frozen=True, slots=True)
class FunctionLikeCognitiveComplexityRule(BaseRule):
    meta = RuleMeta(
        rule_id="C01",
        title="Function-like cognitive complexity",
        description=(
            "Reports functions, methods and lambdas whose cognitive complexity "
            "(nested and sequential breaks in the linear flow) exceeds the configured maximum."
        ),
        default_severity="warn",
    )

    maximum_cognitive_complexity: int = DEFAULT_MAXIMUM_COGNITIVE_COMPLEXITY

    def configure(self, config: CodingStandardConfig) -> FunctionLikeCognitiveComplexityRule:
        return replace(self, maximum_cognitive_complexity=config.cognitive_complexity.maximum)

    def check_file(self, ctx: FileContext) -> list[Violation]:
        if ctx.python_ast is None:
            return []

        violations: list[Violation] = []
        units = sorted(iter_function_likes(ctx.python_ast), key=lambda n: (n.lineno, n.col_offset))
        for node in units:
            complexity = analyze_function_like(node)
            if complexity <= self.maximum_cognitive_complexity:
                continue
            violations.append(
                self._violation(
                    message=(
                        f'Cognitive complexity for "{function_like_name(node)}" is {complexity}, '
                        f"keep it under {self.maximum_cognitive_complexity}"
                    ),
                    suggestion="Extract nested branches into helper functions or return early.",
                    location=loc_from_line(ctx, line=node.lineno, col=node.col_offset + 1),
                )
            )
        return violations


def builtin_readable_rules() -> list[BaseRule]:
    return [FunctionLikeCognitiveComplexityRule()]
