from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from codingstandard.config import CodingStandardConfig, compute_enabled_rule_ids
from codingstandard.engine.context import FileContext
from codingstandard.engine.types import TextEdit, Violation
from codingstandard.rules.base import BaseFixer, BaseRule
from codingstandard.rules.registry import all_rules, rule_ids

logger = logging.getLogger(__name__)


def enabled_rules(config: CodingStandardConfig) -> list[BaseRule]:
    """Return the enabled built-in and plugin rules, configured from `config`."""

    enabled_ids = compute_enabled_rule_ids(config, available_rule_ids=rule_ids())
    rules = [r.configure(config) for r in all_rules() if r.meta.rule_id in enabled_ids]
    logger.debug("Enabled rules: %s", ", ".join(r.meta.rule_id for r in rules) or "<none>")
    return rules


def detect(config: CodingStandardConfig, files: Iterable[FileContext]) -> list[Violation]:
    rules = enabled_rules(config)
    violations: list[Violation] = []
    for file_ctx in files:
        for rule in rules:
            violations.extend(_apply_overrides(config, rule.check_file(file_ctx)))
    return violations


def collect_edits(config: CodingStandardConfig, ctx: FileContext) -> list[TextEdit]:
    edits: list[TextEdit] = []
    for rule in enabled_rules(config):
        if isinstance(rule, BaseFixer):
            edits.extend(rule.fix_file(ctx))
    return edits


def _apply_overrides(config: CodingStandardConfig, violations: list[Violation]) -> list[Violation]:
    overrides = config.rules.severity_overrides
    if not overrides:
        return violations
    adjusted: list[Violation] = []
    for v in violations:
        severity = overrides.get(v.rule_id)
        adjusted.append(v if severity is None else replace(v, severity=severity))
    return adjusted
