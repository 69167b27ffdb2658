"""
Deep merge for JSON-like payloads.

Lets a test override a single nested field of a fixture, e.g.
``{"lines": {"data": [{"amount": 555}]}}``, without restating the rest.
"""

from __future__ import annotations

import copy
from typing import Any


def deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Deep merge overrides into a copy of base.

    Nested dicts merge key by key. Lists of dicts merge element by element:
    the override element at index ``i`` is merged into the base element at
    ``i``, extra override elements are appended and trailing base elements
    are kept. Any other value in ``overrides``, including a list of scalars,
    replaces the base value. Neither argument is mutated.
    """
    result: dict[str, Any] = {}
    for key, value in base.items():
        if key in overrides:
            result[key] = _merge_value(value, overrides[key])
        else:
            result[key] = copy.deepcopy(value)
    # Add keys from overrides not in base
    for key, value in overrides.items():
        if key not in base:
            result[key] = copy.deepcopy(value)
    return result


def merge_lists(base: list[Any], overrides: list[Any]) -> list[Any]:
    """Merge two lists of mappings by position."""
    merged: list[Any] = []
    for index in range(max(len(base), len(overrides))):
        if index >= len(overrides):
            merged.append(copy.deepcopy(base[index]))
        elif index >= len(base):
            merged.append(copy.deepcopy(overrides[index]))
        elif overrides[index] is None:
            # A null placeholder keeps the base element at that position
            merged.append(copy.deepcopy(base[index]))
        else:
            merged.append(_merge_value(base[index], overrides[index]))
    return merged


def _is_mapping_list(value: list[Any]) -> bool:
    return all(item is None or isinstance(item, dict) for item in value)


def _merge_value(base: Any, override: Any) -> Any:
    if isinstance(base, dict) and isinstance(override, dict):
        return deep_merge(base, override)
    if (
        isinstance(base, list)
        and isinstance(override, list)
        and _is_mapping_list(base)
        and _is_mapping_list(override)
    ):
        return merge_lists(base, override)
    return copy.deepcopy(override)
