"""Tests for the HTTP mock server."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from stripe_double.client import ApiClient
from stripe_double.server import create_mock_server
from stripe_double.session import Session


@pytest.fixture
def served() -> Generator[tuple[Session, TestClient], None, None]:
    session = Session(client=ApiClient())
    app = create_mock_server(session)
    yield session, TestClient(app, raise_server_exceptions=False)
    session.stop()


class TestServer:
    def test_starts_session(self, served: tuple[Session, TestClient]) -> None:
        session, http = served
        assert session.is_started
        assert http.get("/health").json() == {"status": "ok", "state": "started"}

    def test_create_and_retrieve_customer(self, served: tuple[Session, TestClient]) -> None:
        session, http = served
        resp = http.post("/v1/customers", data={"email": "s@example.com", "metadata[tier]": "gold"})
        assert resp.status_code == 200
        customer = resp.json()
        assert customer["metadata"] == {"tier": "gold"}

        fetched = http.get(f"/v1/customers/{customer['id']}").json()
        assert fetched["email"] == "s@example.com"
        session.recorder.assert_called("customers", "POST", times=1, email="s@example.com")

    def test_mint_and_list_events(self, served: tuple[Session, TestClient]) -> None:
        session, http = served
        minted = http.post("/_webhooks/customer.created", json={"account_balance": 12345}).json()
        assert minted["data"]["object"]["account_balance"] == 12345

        listing = http.get("/v1/events", params={"limit": 1}).json()
        assert listing["object"] == "list"
        assert [e["id"] for e in listing["data"]] == [minted["id"]]
        assert session.store.events[minted["id"]]["type"] == "customer.created"

    def test_unknown_event_type(self, served: tuple[Session, TestClient]) -> None:
        _, http = served
        resp = http.post("/_webhooks/cow.bell")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "unsupported_event_type"

    def test_not_found(self, served: tuple[Session, TestClient]) -> None:
        _, http = served
        resp = http.get("/v1/customers/cus_nope")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "resource_missing"

    def test_read_only_events(self, served: tuple[Session, TestClient]) -> None:
        _, http = served
        resp = http.delete("/v1/events/test_evt_1")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "unsupported_request"

    def test_malformed_webhook_body(self, served: tuple[Session, TestClient]) -> None:
        session, http = served
        resp = http.post(
            "/_webhooks/customer.created",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert "Invalid JSON" in resp.json()["error"]["message"]
        assert session.store.count("events") == 0

    def test_non_object_webhook_body(self, served: tuple[Session, TestClient]) -> None:
        _, http = served
        resp = http.post("/_webhooks/customer.created", json=[1, 2])
        assert resp.status_code == 400

    def test_form_values_stay_strings(self, served: tuple[Session, TestClient]) -> None:
        _, http = served
        resp = http.post(
            "/v1/customers",
            data={"description": "42", "metadata[zip]": "01234", "metadata[0]": "a"},
        )
        customer = resp.json()
        assert customer["description"] == "42"
        assert customer["metadata"] == {"zip": "01234", "0": "a"}

    def test_form_limit_is_read_as_integer(self, served: tuple[Session, TestClient]) -> None:
        _, http = served
        for _ in range(3):
            http.post("/v1/customers")
        listing = http.get("/v1/customers", params={"limit": "2"}).json()
        assert len(listing["data"]) == 2
        assert listing["has_more"] is True

    def test_rejected_requests_are_recorded(self, served: tuple[Session, TestClient]) -> None:
        session, http = served
        http.delete("/v1/events/test_evt_1")

        entry = session.recorder.last_request
        assert entry is not None
        assert entry.kind == "events"
        assert entry.record_id == "test_evt_1"
        assert entry.status == 400
        assert entry.error == "unsupported_request"
        assert entry.elapsed_ms >= 0
