from __future__ import annotations

import ast
import tokenize
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any

from codingstandard.engine.types import TextEdit

INTERFACE_SUFFIX = "Interface"

# Unnamed patterns; the suffix is derived from each pattern.
DEFAULT_PARENT_TYPES: tuple[str, ...] = (
    "*Command",
    "*Controller",
    "*Repository",
    "*Presenter",
    "*Request",
    "*Response",
    "*EventSubscriber",
    "*FixerInterface",
    "*Rule",
    "*Exception",
    "*Handler",
)


@dataclass(frozen=True, slots=True)
class SuffixRule:
    pattern: str
    suffix: str

    def matches(self, type_name: str) -> bool:
        # `*Repository` also covers `FooRepositoryInterface`.
        return fnmatchcase(type_name, self.pattern) or fnmatchcase(type_name, self.pattern + INTERFACE_SUFFIX)


@dataclass(frozen=True, slots=True)
class ClassDeclaration:
    name: str | None
    parent: str | None = None
    interfaces: tuple[str, ...] = ()
    line: int | None = None  # 1-based, of the name token
    col: int | None = None  # 1-based, of the name token


def derive_suffix(pattern: str) -> str:
    suffix = pattern.lstrip("*")
    if suffix.endswith(INTERFACE_SUFFIX):
        suffix = suffix[: -len(INTERFACE_SUFFIX)]
    return suffix


def normalize_suffix_map(value: Sequence[str] | Mapping[Any, str]) -> tuple[SuffixRule, ...]:
    """
    Turn a configured suffix map into ordered rules.

    Sequence items and integer (or numeric string) keyed entries are unnamed
    patterns whose suffix is derived via `derive_suffix`. A later entry for
    the same pattern replaces the earlier one in place.
    """

    if isinstance(value, Mapping):
        items = [
            (pattern, derive_suffix(pattern)) if _is_unnamed_key(key) else (str(key), pattern)
            for key, pattern in value.items()
        ]
    else:
        items = [(pattern, derive_suffix(pattern)) for pattern in value]

    by_pattern: dict[str, str] = {}
    for pattern, suffix in items:
        by_pattern[pattern] = suffix
    return tuple(SuffixRule(pattern=p, suffix=s) for p, s in by_pattern.items())


def merge_suffix_rules(base: Iterable[SuffixRule], extra: Iterable[SuffixRule]) -> tuple[SuffixRule, ...]:
    by_pattern = {rule.pattern: rule.suffix for rule in base}
    for rule in extra:
        by_pattern[rule.pattern] = rule.suffix
    return tuple(SuffixRule(pattern=p, suffix=s) for p, s in by_pattern.items())


DEFAULT_SUFFIX_RULES: tuple[SuffixRule, ...] = normalize_suffix_map(DEFAULT_PARENT_TYPES)


def rewrite_class_name(declaration: ClassDeclaration, rules: Iterable[SuffixRule]) -> str | None:
    """
    Return the suffixed class name, or None when the name is already fine.

    The parent is checked before the interfaces. Every matching rule appends
    its suffix unless the name already ends with it, so a class matching two
    rules receives both suffixes in rule order.
    """

    if declaration.name is None:
        return None

    rules = tuple(rules)
    types: list[str] = []
    if declaration.parent:
        types.append(declaration.parent)
    types.extend(declaration.interfaces)

    name = declaration.name
    for type_name in types:
        for rule in rules:
            if not rule.matches(type_name):
                continue
            if name.endswith(rule.suffix):
                continue
            name += rule.suffix

    if name == declaration.name:
        return None
    return name


def class_name_edit(declaration: ClassDeclaration, rules: Iterable[SuffixRule], *, rule_id: str) -> TextEdit | None:
    if declaration.name is None or declaration.line is None or declaration.col is None:
        return None
    new_name = rewrite_class_name(declaration, rules)
    if new_name is None:
        return None
    return TextEdit(
        rule_id=rule_id,
        line=declaration.line,
        col=declaration.col,
        end_col=declaration.col + len(declaration.name),
        old_text=declaration.name,
        new_text=new_name,
    )


def class_declarations(tree: ast.AST, tokens: Sequence[tokenize.TokenInfo] | None) -> list[ClassDeclaration]:
    """
    Collect class declarations with their parent and interface names.

    The first base class is the parent; the remaining bases are interfaces.
    When the name token cannot be found in `tokens` the declaration is
    returned without a name.
    """

    name_positions = _class_name_positions(tokens) if tokens is not None else {}

    declarations: list[ClassDeclaration] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.ClassDef):
            continue
        type_names = [name for name in (_base_type_name(base) for base in node.bases) if name is not None]
        parent = type_names[0] if type_names else None
        position = name_positions.get((node.lineno, node.col_offset))
        if position is None or position[2] != node.name:
            declarations.append(ClassDeclaration(name=None, parent=parent, interfaces=tuple(type_names[1:])))
            continue
        line, col, _name = position
        declarations.append(
            ClassDeclaration(
                name=node.name,
                parent=parent,
                interfaces=tuple(type_names[1:]),
                line=line,
                col=col + 1,
            )
        )
    return declarations


def _is_unnamed_key(key: Any) -> bool:
    if isinstance(key, bool):
        return False
    if isinstance(key, int):
        return True
    return isinstance(key, str) and key.strip().isdigit()


def _base_type_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Subscript):
        return _base_type_name(node.value)
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        owner = _base_type_name(node.value)
        return f"{owner}.{node.attr}" if owner is not None else None
    return None


def _class_name_positions(tokens: Sequence[tokenize.TokenInfo]) -> dict[tuple[int, int], tuple[int, int, str]]:
    # (line, col) of each `class` keyword -> (line, col, text) of the NAME after it.
    # Column offsets are 0-based like `ast` offsets for ASCII source.
    positions: dict[tuple[int, int], tuple[int, int, str]] = {}
    for idx, tok in enumerate(tokens):
        if tok.type != tokenize.NAME or tok.string != "class":
            continue
        nxt = _next_significant(tokens, idx + 1)
        if nxt is None or nxt.type != tokenize.NAME:
            continue
        positions[tok.start] = (nxt.start[0], nxt.start[1], nxt.string)
    return positions


def _next_significant(tokens: Sequence[tokenize.TokenInfo], start: int) -> tokenize.TokenInfo | None:
    for tok in tokens[start:]:
        if tok.type in {tokenize.NL, tokenize.COMMENT}:
            continue
        return tok
    return None
