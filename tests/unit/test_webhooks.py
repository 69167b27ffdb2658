"""Tests for webhook event simulation."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

import stripe_double
from stripe_double.errors import (
    ErrorKind,
    UnstartedStateError,
    UnsupportedEventTypeError,
    UnsupportedRequestError,
)
from stripe_double.fixtures import bundled_fixture_dir
from stripe_double.objects import StripeObject
from stripe_double.resources import Event
from stripe_double.session import Session
from stripe_double.webhooks import EVENT_NAMES, event_list

EVENT_ID = re.compile(r"^test_evt_[0-9]+")


class TestCatalog:
    def test_event_list_matches_fixture_folder(self) -> None:
        events = event_list()
        file_names = {p.name.removesuffix(".json") for p in bundled_fixture_dir().glob("*.json")}
        # Differences rather than equality so a missing name shows up in the report
        assert events - file_names == set()
        assert file_names - events == set()

    def test_catalog_has_no_duplicates(self) -> None:
        assert len(EVENT_NAMES) == len(event_list())

    def test_can_generate_all_events(self, session: Session) -> None:
        for event_name in sorted(event_list()):
            event = session.mock_webhook_event(event_name)
            assert event.type == event_name
            assert EVENT_ID.match(event.id)
        assert session.store.count("events") == len(event_list())


class TestFixtureLookup:
    def test_project_folder_is_checked_first(self, session: Session) -> None:
        event = session.mock_webhook_event("account.updated")
        payload = session.mock_webhook_payload("account.updated")

        assert isinstance(event, StripeObject)
        assert EVENT_ID.match(event.id)
        assert event.type == "account.updated"
        assert event.data.object.business_name == "Project Fixture Ltd"

        assert isinstance(payload, dict)
        assert EVENT_ID.match(payload["id"])
        assert payload["type"] == "account.updated"

    def test_bundled_fixture_used_when_project_has_none(self, session: Session) -> None:
        event = session.mock_webhook_event("customer.created")
        assert event.data.object.email == "jenny.rosen@example.com"

    def test_allows_non_standard_names_in_project_folder(self, session: Session) -> None:
        event = session.mock_webhook_event("custom.account.updated")
        session.mock_webhook_payload("custom.account.updated")
        assert event.data.object.custom_field == "project-only"

    def test_configuring_the_project_folder(self, dummy_fixture_dir: Path) -> None:
        stripe_double.start()
        original_path = stripe_double.get_webhook_fixture_path()

        stripe_double.set_webhook_fixture_path(dummy_fixture_dir)
        assert stripe_double.get_webhook_fixture_path() == dummy_fixture_dir

        event = stripe_double.mock_webhook_event("dummy.event")
        payload = stripe_double.mock_webhook_payload("dummy.event")
        assert event.val == "success"
        assert payload["val"] == "success"

        stripe_double.set_webhook_fixture_path(original_path)
        with pytest.raises(UnsupportedEventTypeError):
            stripe_double.mock_webhook_event("dummy.event")


class TestGeneration:
    def test_stores_event_in_memory(self, session: Session) -> None:
        event = session.mock_webhook_event("customer.created")
        assert event.id is not None

        data = session.store.events
        assert data[event.id] is not None
        assert data[event.id]["id"] == event.id
        assert data[event.id]["type"] == "customer.created"

    def test_generates_distinct_ids(self, session: Session) -> None:
        event_a = session.mock_webhook_event("customer.created")
        event_b = session.mock_webhook_event("customer.created")
        assert event_a.id != event_b.id

        data = session.store.events
        assert data[event_a.id]["id"] == event_a.id
        assert data[event_b.id]["id"] == event_b.id

    def test_event_and_payload_share_data(self, session: Session) -> None:
        payload = session.mock_webhook_payload("plan.created")
        assert session.store.events[payload["id"]] is payload

        event = session.mock_webhook_event("plan.created")
        assert event.to_dict() is session.store.events[event.id]

    def test_retrieve_through_event_resource(self, session: Session, client) -> None:
        webhook_event = session.mock_webhook_event("plan.created")
        event = Event.retrieve(webhook_event.id, client=client)
        assert event.type == "plan.created"

    def test_standard_event_fields(self, session: Session) -> None:
        payload = session.mock_webhook_payload("charge.succeeded")
        assert payload["object"] == "event"
        assert payload["livemode"] is False
        assert isinstance(payload["created"], int)
        # Fixture metadata is carried over
        assert payload["api_version"]
        assert payload["pending_webhooks"] == 1


class TestOverrides:
    def test_deep_merges_into_data_object(self, session: Session) -> None:
        event = session.mock_webhook_event("customer.created", {"account_balance": 12345})
        payload = session.mock_webhook_payload("customer.created", {"account_balance": 12345})

        assert event.data.object.account_balance == 12345
        assert payload["data"]["object"]["account_balance"] == 12345
        # Other fixture fields untouched
        assert event.data.object.email == "jenny.rosen@example.com"
        assert event.data.object.currency == "usd"

    def test_deep_merges_arrays_in_data_object(self, session: Session) -> None:
        event = session.mock_webhook_event(
            "invoice.created",
            {"lines": {"data": [{"amount": 555, "plan": {"id": "wh_test"}}]}},
        )
        line = event.data.object.lines.data[0]
        assert line.amount == 555
        assert line.plan.id == "wh_test"
        # Data from invoice.created.json is still present
        assert line.type == "subscription"
        assert line.plan.currency == "usd"

    def test_account_goes_to_top_level(self, session: Session) -> None:
        payload = session.mock_webhook_payload("charge.succeeded", {"account": "acct_123"})
        assert payload["account"] == "acct_123"
        assert "account" not in payload["data"]["object"]

    def test_created_override(self, session: Session) -> None:
        payload = session.mock_webhook_payload("charge.succeeded", {"created": 1500000000})
        assert payload["created"] == 1500000000

    def test_overrides_not_mutated(self, session: Session) -> None:
        overrides = {"account": "acct_1", "metadata": {"a": "b"}}
        session.mock_webhook_payload("customer.created", overrides)
        assert overrides == {"account": "acct_1", "metadata": {"a": "b"}}


class TestErrors:
    def test_unknown_event_type(self, session: Session) -> None:
        with pytest.raises(UnsupportedRequestError):
            session.mock_webhook_event("cow.bell")

        with pytest.raises(UnsupportedEventTypeError) as exc_info:
            session.mock_webhook_payload("cow.bell")
        assert exc_info.value.kind is ErrorKind.UNSUPPORTED_EVENT_TYPE
        assert "cow.bell" in exc_info.value.message

    def test_unknown_event_is_not_stored(self, session: Session) -> None:
        with pytest.raises(UnsupportedEventTypeError):
            session.mock_webhook_event("cow.bell")
        assert session.store.count("events") == 0

    def test_requires_started_session(self) -> None:
        with pytest.raises(UnstartedStateError):
            Session().mock_webhook_event("customer.created")
        with pytest.raises(UnstartedStateError):
            stripe_double.mock_webhook_payload("customer.created")
