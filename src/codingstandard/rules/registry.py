from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType

from codingstandard.rules.base import BaseRule, RuleMeta
from codingstandard.rules.naming import builtin_naming_rules
from codingstandard.rules.readable import builtin_readable_rules

logger = logging.getLogger(__name__)

_RULE_ID_RE = re.compile(r"^[A-Z][0-9]{2,}$")
_EXTRA_RULES: dict[str, BaseRule] = {}
_EXTRA_GENERATION = 0


def _validate_rule_id(rule_id: str) -> None:
    if rule_id != rule_id.strip() or rule_id != rule_id.upper():
        raise RuntimeError(f"Rule id must be canonical uppercase without whitespace: {rule_id!r}")
    if not _RULE_ID_RE.match(rule_id):
        raise RuntimeError(f"Rule id must match {_RULE_ID_RE.pattern}: {rule_id!r}")


@lru_cache(maxsize=1)
def builtin_rules() -> tuple[BaseRule, ...]:
    rules: list[BaseRule] = []
    rules.extend(builtin_readable_rules())
    rules.extend(builtin_naming_rules())

    by_id: dict[str, BaseRule] = {}
    for rule in rules:
        rule_id = rule.meta.rule_id
        _validate_rule_id(rule_id)
        if rule_id in by_id:  # pragma: no cover
            raise RuntimeError(f"Duplicate rule id: {rule_id}")
        by_id[rule_id] = rule

    return tuple(by_id[k] for k in sorted(by_id))


def set_extra_rules(rules: Iterable[BaseRule]) -> None:
    """
    Register extra (plugin) rules for this process.

    The CLI loads plugins once per invocation, so process-wide registration
    is enough for the detection engine and the `rules` listing.
    """

    global _EXTRA_RULES, _EXTRA_GENERATION  # noqa: PLW0603

    by_id: dict[str, BaseRule] = {}
    builtin_ids = {r.meta.rule_id for r in builtin_rules()}
    for rule in rules:
        rule_id = rule.meta.rule_id
        _validate_rule_id(rule_id)
        if rule_id in builtin_ids:
            raise RuntimeError(f"Plugin rule id conflicts with built-in rule id: {rule_id}")
        if rule_id in by_id:
            raise RuntimeError(f"Duplicate plugin rule id: {rule_id}")
        by_id[rule_id] = rule

    if by_id:
        logger.debug("Registered plugin rules: %s", ", ".join(sorted(by_id)))
    _EXTRA_RULES = by_id
    _EXTRA_GENERATION += 1


def all_rules() -> tuple[BaseRule, ...]:
    return _all_rules(_EXTRA_GENERATION)


@lru_cache(maxsize=4)
def _all_rules(extra_generation: int) -> tuple[BaseRule, ...]:
    _ = extra_generation
    rules = list(builtin_rules())
    rules.extend(_EXTRA_RULES.values())
    by_id = {r.meta.rule_id: r for r in rules}
    return tuple(by_id[k] for k in sorted(by_id))


def rule_ids() -> set[str]:
    return {r.meta.rule_id for r in all_rules()}


def rule_meta_by_id() -> Mapping[str, RuleMeta]:
    return _rule_meta_by_id_map(_EXTRA_GENERATION)


@lru_cache(maxsize=4)
def _rule_meta_by_id_map(extra_generation: int) -> Mapping[str, RuleMeta]:
    _ = extra_generation
    return MappingProxyType({r.meta.rule_id: r.meta for r in all_rules()})
