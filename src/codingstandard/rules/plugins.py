from __future__ import annotations

import importlib
from collections.abc import Iterable
from types import ModuleType
from typing import Any

from codingstandard.rules.base import BaseRule


class PluginLoadError(RuntimeError):
    """Raised when a configured plugin cannot be imported or doesn't expose rules."""


def load_plugin_rules(plugin_specs: Iterable[str]) -> list[BaseRule]:
    """
    Import rules from `module` or `module:attr` specs.

    A module exposes either a `codingstandard_rules()` factory or a `RULES`
    list; an attribute may be a factory or a list/tuple of rule instances.
    """

    rules: list[BaseRule] = []
    for raw_spec in plugin_specs:
        spec = raw_spec.strip()
        if spec:
            rules.extend(_load_one(spec))
    return rules


def _load_one(spec: str) -> list[BaseRule]:
    module_name, sep, attr = spec.partition(":")
    try:
        module = importlib.import_module(module_name)
    except Exception as exc:  # noqa: BLE001
        raise PluginLoadError(f"Failed to import plugin module {module_name!r}: {exc}") from exc

    obj: Any = module
    if sep:
        try:
            obj = getattr(module, attr)
        except AttributeError as exc:
            raise PluginLoadError(f"Plugin module {module_name!r} has no attribute {attr!r}") from exc
    return list(_extract_rules(obj))


def _extract_rules(obj: Any) -> Iterable[BaseRule]:
    if isinstance(obj, ModuleType):
        for name in ("codingstandard_rules", "RULES"):
            if hasattr(obj, name):
                return _extract_rules(getattr(obj, name))
        raise PluginLoadError("Plugin module must define `codingstandard_rules()` or `RULES`.")

    if isinstance(obj, list | tuple):
        out: list[BaseRule] = []
        for item in obj:
            if not isinstance(item, BaseRule):
                raise PluginLoadError(f"Plugin rules must be BaseRule instances, got: {type(item).__name__}")
            out.append(item)
        return out

    if callable(obj):
        return _extract_rules(obj())

    raise PluginLoadError(f"Unsupported plugin export type: {type(obj).__name__}")
