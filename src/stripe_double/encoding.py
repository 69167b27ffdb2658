"""
Form encoding in the API's bracket notation.

``{"lines": {"data": [{"amount": 5}]}}`` travels as
``lines[data][0][amount]=5``. Decoding rebuilds the nesting but leaves
every value a string.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import parse_qsl

_KEY_RE = re.compile(r"[^\[\]]+|\[\]")
# Free-form maps whose keys are never list indexes
FREE_FORM_KEYS = frozenset({"metadata"})


def encode_params(params: dict[str, Any], prefix: str | None = None) -> list[tuple[str, str]]:
    """Flatten nested params into ``(key, value)`` pairs."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        full_key = f"{prefix}[{key}]" if prefix else str(key)
        pairs.extend(_encode_value(full_key, value))
    return pairs


def _encode_value(key: str, value: Any) -> list[tuple[str, str]]:
    if isinstance(value, dict):
        return encode_params(value, key)
    if isinstance(value, (list, tuple)):
        pairs: list[tuple[str, str]] = []
        for index, item in enumerate(value):
            pairs.extend(_encode_value(f"{key}[{index}]", item))
        return pairs
    if isinstance(value, bool):
        return [(key, "true" if value else "false")]
    if value is None:
        return [(key, "")]
    return [(key, str(value))]


def decode_params(pairs: list[tuple[str, str]] | str) -> dict[str, Any]:
    """Rebuild nested params from pairs or a raw urlencoded string.

    Values stay strings; the wire carries no type information.
    """
    if isinstance(pairs, str):
        pairs = parse_qsl(pairs, keep_blank_values=True)

    root: dict[str, Any] = {}
    for raw_key, value in pairs:
        parts = _KEY_RE.findall(raw_key)
        if not parts:
            continue
        node = root
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        last = parts[-1]
        if last == "[]":
            node.setdefault("[]", []).append(value)
        else:
            node[last] = value
    return _listify(root)


def _listify(node: Any, *, free_form: bool = False) -> Any:
    """Turn dicts keyed ``"0", "1", ...`` (or ``"[]"``) into lists.

    Keys under ``metadata`` are arbitrary strings and are never turned into
    list indexes.
    """
    if not isinstance(node, dict):
        return node
    if set(node) == {"[]"}:
        return [_listify(v) for v in node["[]"]]
    if not free_form and node and all(k.isdigit() for k in node):
        return [_listify(node[k]) for k in sorted(node, key=int)]
    return {k: _listify(v, free_form=k in FREE_FORM_KEYS) for k, v in node.items()}
