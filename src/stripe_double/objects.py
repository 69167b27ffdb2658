"""
Attribute-access views over raw API payloads.

A ``StripeObject`` wraps a payload dict without copying it: reading
``event.data.object.amount`` walks the same dict that is stored in the mock
store, so the typed view and the raw mapping always agree.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


def wrap(value: Any) -> Any:
    """Wrap dicts (and dicts inside lists) in StripeObject views."""
    if isinstance(value, StripeObject):
        return value
    if isinstance(value, dict):
        if value.get("object") == "list":
            return ListObject(value)
        return StripeObject(value)
    if isinstance(value, list):
        return [wrap(v) for v in value]
    return value


class StripeObject(Mapping[str, Any]):
    """Read/write view over a payload dict.

    Args:
        values: The underlying dict. It is shared, not copied.
    """

    __slots__ = ("_values",)

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        object.__setattr__(self, "_values", values if values is not None else {})

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return wrap(self._values[name])
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no attribute '{name}'"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._values[name] = value

    def __getitem__(self, key: str) -> Any:
        return wrap(self._values[key])

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StripeObject):
            return self._values == other._values
        if isinstance(other, dict):
            return self._values == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        ident = self._values.get("id")
        label = self._values.get("object", type(self).__name__)
        return f"<{label} id={ident}>" if ident else f"<{label}>"

    def to_dict(self) -> dict[str, Any]:
        """The underlying payload dict (not a copy)."""
        return self._values


class ListObject(StripeObject):
    """A Stripe list envelope: ``{"object": "list", "data": [...], "has_more": ...}``."""

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        return iter(self.data)

    def __len__(self) -> int:
        return len(self._values.get("data", []))

    @property
    def data(self) -> list[Any]:
        return [wrap(item) for item in self._values.get("data", [])]

    @property
    def has_more(self) -> bool:
        return bool(self._values.get("has_more", False))

    def count(self) -> int:
        return len(self)
