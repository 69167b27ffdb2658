"""Tests for attribute-access payload views."""

from __future__ import annotations

import pytest

from stripe_double.objects import ListObject, StripeObject, wrap


def _invoice() -> dict:
    return {
        "id": "in_1",
        "object": "invoice",
        "lines": {
            "object": "list",
            "has_more": False,
            "data": [{"amount": 1000, "plan": {"id": "gold", "currency": "usd"}}],
        },
    }


class TestStripeObject:
    def test_attribute_and_item_access(self) -> None:
        obj = StripeObject({"id": "cus_1", "email": "a@example.com"})
        assert obj.id == "cus_1"
        assert obj["email"] == "a@example.com"

    def test_nested_access(self) -> None:
        obj = StripeObject(_invoice())
        assert isinstance(obj.lines, ListObject)
        assert obj.lines.data[0].plan.currency == "usd"

    def test_views_share_the_underlying_dict(self) -> None:
        raw = _invoice()
        obj = StripeObject(raw)
        obj.lines.data[0].plan.id = "silver"
        assert raw["lines"]["data"][0]["plan"]["id"] == "silver"

        raw["id"] = "in_2"
        assert obj.id == "in_2"
        assert obj.to_dict() is raw

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            StripeObject({}).nothing  # noqa: B018

    def test_equality_with_dicts(self) -> None:
        assert StripeObject({"a": 1}) == {"a": 1}
        assert StripeObject({"a": 1}) == StripeObject({"a": 1})

    def test_mapping_protocol(self) -> None:
        obj = StripeObject({"a": 1, "b": 2})
        assert len(obj) == 2
        assert set(obj) == {"a", "b"}
        assert dict(obj.items()) == {"a": 1, "b": 2}


class TestListObject:
    def test_iterates_data(self) -> None:
        lst = ListObject({"object": "list", "data": [{"id": "a"}, {"id": "b"}], "has_more": True})
        assert [item.id for item in lst] == ["a", "b"]
        assert len(lst) == 2
        assert lst.count() == 2
        assert lst.has_more is True

    def test_wrap_picks_list_object(self) -> None:
        assert isinstance(wrap({"object": "list", "data": []}), ListObject)
        assert isinstance(wrap({"object": "customer"}), StripeObject)
        assert wrap(5) == 5
