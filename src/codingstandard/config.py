from __future__ import annotations

import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

from codingstandard.engine.suffixes import DEFAULT_SUFFIX_RULES, SuffixRule, merge_suffix_rules, normalize_suffix_map
from codingstandard.engine.types import Severity


class ConfigError(ValueError):
    """Raised when a codingstandard configuration is invalid."""


RuleId = str
RuleGroup = str

_RULE_ID_RE = re.compile(r"^[A-Z][0-9]{2,}$")
_TABLE = "tool.codingstandard"

_TOP_LEVEL_KEYS = frozenset(
    {"rules", "plugins", "cognitive-complexity", "cognitive_complexity", "class-suffix", "class_suffix"}
)
_RULES_KEYS = frozenset({"enable", "disable", "severity_overrides", "severity-overrides"})
_MAXIMUM_KEYS = ("maximum-cognitive-complexity", "maximum_cognitive_complexity", "maximumCognitiveComplexity")
_PRIMARY_SUFFIX_KEYS = ("parent_types_to_suffixes", "parent-types-to-suffixes")
_EXTRA_SUFFIX_KEYS = ("extra_parent_types_to_suffixes", "extra-parent-types-to-suffixes")

DEFAULT_MAXIMUM_COGNITIVE_COMPLEXITY = 8

# Keep in sync with `codingstandard.rules.registry.builtin_rules()`.
DEFAULT_RULE_GROUPS: dict[RuleGroup, tuple[RuleId, ...]] = {
    "complexity": ("C01",),
    "naming": ("N01",),
}
DEFAULT_RULE_GROUPS["all"] = tuple(
    rule_id for group in ("complexity", "naming") for rule_id in DEFAULT_RULE_GROUPS[group]
)


def _normalize_group(value: str) -> str:
    return value.strip().lower().replace("-", "_")


def _normalize_rule_id(value: str) -> str:
    return value.strip().upper()


def _get_option(table: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in table:
            return table[name]
    return default


def _reject_unknown_keys(table: Mapping[str, Any], allowed: frozenset[str], *, field_name: str) -> None:
    for key in table:
        if key not in allowed:
            valid = ", ".join(sorted(allowed))
            raise ConfigError(f"`{field_name}` contains unknown option: {key!r}. ({valid})")


def _validate_str_list(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list | tuple) or any(not isinstance(v, str) for v in value):
        raise ConfigError(f"`{field_name}` must be a list of strings.")
    return tuple(v.strip() for v in value)


def _validate_severity(value: Any, *, field_name: str) -> Severity:
    if not isinstance(value, str):
        raise ConfigError(f"`{field_name}` must be a string.")
    normalized = value.strip().lower()
    if normalized == "warning":
        normalized = "warn"
    if normalized not in {"info", "warn", "error"}:
        raise ConfigError(f"`{field_name}` must be one of: info, warn, error.")
    return cast(Severity, normalized)


@dataclass(frozen=True, slots=True)
class RulesConfig:
    enable: str | tuple[str, ...] = "all"
    disable: tuple[str, ...] = ()
    severity_overrides: Mapping[RuleId, Severity] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class CognitiveComplexityConfig:
    maximum: int = DEFAULT_MAXIMUM_COGNITIVE_COMPLEXITY


@dataclass(frozen=True, slots=True)
class ClassSuffixConfig:
    rules: tuple[SuffixRule, ...] = DEFAULT_SUFFIX_RULES


@dataclass(frozen=True, slots=True)
class CodingStandardConfig:
    rules: RulesConfig = field(default_factory=RulesConfig)
    cognitive_complexity: CognitiveComplexityConfig = field(default_factory=CognitiveComplexityConfig)
    class_suffix: ClassSuffixConfig = field(default_factory=ClassSuffixConfig)
    plugins: tuple[str, ...] = ()


def load_config(project_dir: Path | str = ".") -> CodingStandardConfig:
    """
    Load configuration from `pyproject.toml` within `project_dir`.

    If no file / no `[tool.codingstandard]` table exists, returns defaults.
    """

    pyproject_path = Path(project_dir) / "pyproject.toml"
    if not pyproject_path.exists():
        return CodingStandardConfig()

    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {pyproject_path}: {exc}") from exc

    tool_table = data.get("tool", {})
    if not isinstance(tool_table, dict):
        raise ConfigError(f"`tool` in {pyproject_path} must be a table.")

    if "codingstandard" not in tool_table:
        return CodingStandardConfig()
    return parse_config(tool_table["codingstandard"])


def parse_config(table: Mapping[str, Any]) -> CodingStandardConfig:
    """Validate a `[tool.codingstandard]`-shaped mapping."""

    if not isinstance(table, Mapping):
        raise ConfigError(f"`{_TABLE}` must be a table.")
    _reject_unknown_keys(table, _TOP_LEVEL_KEYS, field_name=_TABLE)

    rules = _parse_rules_config(table.get("rules", {}))
    cognitive_complexity = _parse_cognitive_complexity(
        _get_option(table, "cognitive-complexity", "cognitive_complexity", default={})
    )
    class_suffix = _parse_class_suffix(_get_option(table, "class-suffix", "class_suffix", default={}))
    plugins = _validate_str_list(table.get("plugins", []), field_name=f"{_TABLE}.plugins")

    return CodingStandardConfig(
        rules=rules,
        cognitive_complexity=cognitive_complexity,
        class_suffix=class_suffix,
        plugins=plugins,
    )


def _parse_rules_config(value: Any) -> RulesConfig:
    if value is None:
        return RulesConfig()
    if not isinstance(value, Mapping):
        raise ConfigError(f"`{_TABLE}.rules` must be a table.")
    _reject_unknown_keys(value, _RULES_KEYS, field_name=f"{_TABLE}.rules")

    enable: str | tuple[str, ...]
    enable_raw = value.get("enable", "all")
    if isinstance(enable_raw, str):
        enable = enable_raw.strip() or "all"
    elif isinstance(enable_raw, list | tuple) and all(isinstance(v, str) for v in enable_raw):
        enable = tuple(v.strip() for v in enable_raw if v.strip())
    else:
        raise ConfigError(f"`{_TABLE}.rules.enable` must be a string or a list of strings.")

    disable = _validate_str_list(value.get("disable", []), field_name=f"{_TABLE}.rules.disable")

    _validate_rule_tokens((enable,) if isinstance(enable, str) else enable, field_name=f"{_TABLE}.rules.enable")
    _validate_rule_tokens(disable, field_name=f"{_TABLE}.rules.disable")

    severity_overrides: dict[RuleId, Severity] = {}
    raw_overrides = _get_option(value, "severity_overrides", "severity-overrides")
    if raw_overrides is not None:
        if not isinstance(raw_overrides, Mapping):
            raise ConfigError(f"`{_TABLE}.rules.severity_overrides` must be a table.")
        for raw_rule_id, raw_severity in raw_overrides.items():
            rule_id = _normalize_rule_id(str(raw_rule_id))
            if not _RULE_ID_RE.match(rule_id):
                raise ConfigError(
                    f"`{_TABLE}.rules.severity_overrides.{raw_rule_id}` is invalid; expected a rule id like C01."
                )
            severity_overrides[rule_id] = _validate_severity(
                raw_severity, field_name=f"{_TABLE}.rules.severity_overrides.{raw_rule_id}"
            )

    return RulesConfig(enable=enable, disable=disable, severity_overrides=MappingProxyType(severity_overrides))


def _parse_cognitive_complexity(value: Any) -> CognitiveComplexityConfig:
    field_name = f"{_TABLE}.cognitive-complexity"
    if value is None:
        return CognitiveComplexityConfig()
    if not isinstance(value, Mapping):
        raise ConfigError(f"`{field_name}` must be a table.")
    _reject_unknown_keys(value, frozenset(_MAXIMUM_KEYS), field_name=field_name)

    maximum = _get_option(value, *_MAXIMUM_KEYS, default=DEFAULT_MAXIMUM_COGNITIVE_COMPLEXITY)
    if isinstance(maximum, bool) or not isinstance(maximum, int):
        raise ConfigError(f"`{field_name}.maximum-cognitive-complexity` must be an integer.")
    if maximum < 0:
        raise ConfigError(f"`{field_name}.maximum-cognitive-complexity` must be >= 0.")
    return CognitiveComplexityConfig(maximum=maximum)


def _parse_class_suffix(value: Any) -> ClassSuffixConfig:
    field_name = f"{_TABLE}.class-suffix"
    if value is None:
        return ClassSuffixConfig()
    if not isinstance(value, Mapping):
        raise ConfigError(f"`{field_name}` must be a table.")
    _reject_unknown_keys(value, frozenset(_PRIMARY_SUFFIX_KEYS + _EXTRA_SUFFIX_KEYS), field_name=field_name)

    primary_raw = _get_option(value, *_PRIMARY_SUFFIX_KEYS)
    extra_raw = _get_option(value, *_EXTRA_SUFFIX_KEYS)

    primary = (
        DEFAULT_SUFFIX_RULES
        if primary_raw is None
        else _parse_suffix_map(primary_raw, field_name=f"{field_name}.parent_types_to_suffixes")
    )
    extra = (
        ()
        if extra_raw is None
        else _parse_suffix_map(extra_raw, field_name=f"{field_name}.extra_parent_types_to_suffixes")
    )
    return ClassSuffixConfig(rules=merge_suffix_rules(primary, extra))


def _parse_suffix_map(value: Any, *, field_name: str) -> tuple[SuffixRule, ...]:
    message = f"`{field_name}` must be a list of strings or a table of strings."
    if isinstance(value, Mapping):
        for key, suffix in value.items():
            if not isinstance(suffix, str) or not (isinstance(key, str | int) and not isinstance(key, bool)):
                raise ConfigError(message)
            if isinstance(key, str) and not key.strip():
                raise ConfigError(f"`{field_name}` contains an empty pattern.")
    elif isinstance(value, list | tuple):
        if any(not isinstance(v, str) for v in value):
            raise ConfigError(message)
    else:
        raise ConfigError(message)

    rules = normalize_suffix_map(value)
    for rule in rules:
        if not rule.pattern.strip():
            raise ConfigError(f"`{field_name}` contains an empty pattern.")
        if not rule.suffix:
            raise ConfigError(f"`{field_name}` entry {rule.pattern!r} resolves to an empty suffix.")
    return rules


def _validate_rule_tokens(tokens: Iterable[str], *, field_name: str) -> None:
    for token in tokens:
        stripped = token.strip()
        if not stripped:
            continue
        if _normalize_group(stripped) in DEFAULT_RULE_GROUPS:
            continue
        if _RULE_ID_RE.match(_normalize_rule_id(stripped)):
            continue

        groups = ", ".join(sorted(DEFAULT_RULE_GROUPS))
        raise ConfigError(
            f"`{field_name}` contains unknown rule group or invalid rule id: {token!r}. "
            f"Valid groups: {groups}. Valid ids look like C01/N01."
        )


def compute_enabled_rule_ids(
    config: CodingStandardConfig,
    *,
    available_rule_ids: Iterable[RuleId] | None = None,
) -> set[RuleId]:
    """
    Resolve the final enabled rules set from `rules.enable` + `rules.disable`.

    - `enable = "all"` enables every available rule (plugins included).
    - `enable = ["naming"]` enables group(s) and/or explicit IDs.
    - `disable = ["C01"]` disables specific IDs (or groups).
    """

    available: set[RuleId] | None = set(available_rule_ids) if available_rule_ids is not None else None

    enable_spec = config.rules.enable
    enable_tokens = (enable_spec,) if isinstance(enable_spec, str) else enable_spec

    enabled: set[RuleId] = set()
    for token in enable_tokens:
        group = _normalize_group(token)
        if group == "all":
            enabled.update(available if available is not None else DEFAULT_RULE_GROUPS["all"])
        elif group in DEFAULT_RULE_GROUPS:
            enabled.update(DEFAULT_RULE_GROUPS[group])
        else:
            enabled.add(_normalize_rule_id(token))

    for token in config.rules.disable:
        group = _normalize_group(token)
        if group == "all":
            enabled.clear()
        elif group in DEFAULT_RULE_GROUPS:
            enabled.difference_update(DEFAULT_RULE_GROUPS[group])
        else:
            enabled.discard(_normalize_rule_id(token))

    if available is not None:
        enabled.intersection_update(available)

    return enabled


def find_project_root(start: Path) -> Path:
    """Return the closest directory at or above `start` holding a pyproject.toml."""

    base = start if start.is_dir() else start.parent
    for candidate in (base, *base.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return base
