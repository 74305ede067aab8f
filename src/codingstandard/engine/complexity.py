"""
Cognitive complexity of Python function-like units.

Based on https://www.sonarsource.com/docs/CognitiveComplexity.pdf

A Cognitive Complexity score has 3 rules:
- B1. Ignore structures that allow multiple statements to be readably shorthanded into one
- B2. Increment (add one) for each break in the linear flow of the code
- B3. Increment when flow-breaking structures are nested
"""

from __future__ import annotations

import ast
from collections.abc import Iterable

FunctionLike = ast.FunctionDef | ast.AsyncFunctionDef | ast.Lambda

FUNCTION_LIKE_TYPES: tuple[type[ast.AST], ...] = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)


class ShouldNotHappenError(AssertionError):
    """Raised when a node that is not function-like reaches name resolution."""


def analyze_function_like(node: FunctionLike) -> int:
    """
    Return the cognitive complexity of `node`.

    Only the unit's own body is scored. Nested functions, lambdas and classes
    are skipped: they are scored separately when visited as units themselves.
    """

    visitor = _CognitiveComplexityVisitor()
    body: list[ast.AST] = [node.body] if isinstance(node, ast.Lambda) else list(node.body)
    for child in body:
        visitor.visit(child)
    return visitor.complexity


def iter_function_likes(tree: ast.AST) -> Iterable[FunctionLike]:
    for node in ast.walk(tree):
        if isinstance(node, FUNCTION_LIKE_TYPES):
            yield node  # type: ignore[misc]


def function_like_name(node: ast.AST) -> str:
    if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef):
        return f"{node.name}()"
    if isinstance(node, ast.Lambda):
        return "lambda"
    raise ShouldNotHappenError(f"Unsupported function-like node: {type(node).__name__}")


class _CognitiveComplexityVisitor(ast.NodeVisitor):
    def __init__(self) -> None:
        self.complexity = 0
        self.nesting = 0

    def _increment_nested(self) -> None:
        self.complexity += 1 + self.nesting

    def _visit_nested(self, nodes: Iterable[ast.AST]) -> None:
        self.nesting += 1
        try:
            for child in nodes:
                self.visit(child)
        finally:
            self.nesting -= 1

    # Nested units and classes are scored on their own.
    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        return None

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        return None

    def visit_Lambda(self, node: ast.Lambda) -> None:
        return None

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        return None

    def visit_If(self, node: ast.If) -> None:
        self._increment_nested()
        self.visit(node.test)
        self._visit_nested(node.body)

        orelse = node.orelse
        if not orelse:
            return
        if _is_elif(node, orelse):
            self.visit_If(orelse[0])  # type: ignore[arg-type]
            return
        self.complexity += 1
        self._visit_nested(orelse)

    def _visit_loop(self, node: ast.For | ast.AsyncFor | ast.While) -> None:
        self._increment_nested()
        if isinstance(node, ast.While):
            self.visit(node.test)
        else:
            self.visit(node.target)
            self.visit(node.iter)
        self._visit_nested(node.body)
        if node.orelse:
            self.complexity += 1
            self._visit_nested(node.orelse)

    visit_For = _visit_loop
    visit_AsyncFor = _visit_loop
    visit_While = _visit_loop

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        self._increment_nested()
        if node.type is not None:
            self.visit(node.type)
        self._visit_nested(node.body)

    def visit_Match(self, node: ast.Match) -> None:
        self._increment_nested()
        self.visit(node.subject)
        self.nesting += 1
        try:
            for case in node.cases:
                if case.guard is not None:
                    self.visit(case.guard)
                for child in case.body:
                    self.visit(child)
        finally:
            self.nesting -= 1

    def visit_IfExp(self, node: ast.IfExp) -> None:
        self._increment_nested()
        self._visit_nested((node.test, node.body, node.orelse))

    def visit_BoolOp(self, node: ast.BoolOp) -> None:
        # One increment per run of the same operator.
        self.complexity += 1
        self._visit_bool_operands(node)

    def _visit_bool_operands(self, node: ast.BoolOp) -> None:
        for value in node.values:
            if isinstance(value, ast.BoolOp) and type(value.op) is type(node.op):
                self._visit_bool_operands(value)
            else:
                self.visit(value)


def _is_elif(node: ast.If, orelse: list[ast.stmt]) -> bool:
    if len(orelse) != 1 or not isinstance(orelse[0], ast.If):
        return False
    # `elif` starts in the column of its `if`; `else:` + nested `if` is indented.
    return orelse[0].col_offset == node.col_offset
