"""
Webhook event simulation and delivery.

Mints Stripe-style event payloads from JSON fixtures, stores them as
``events`` in the session store, and optionally delivers them, signed, to an
application's webhook endpoint.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from stripe_double.errors import UnsupportedEventTypeError
from stripe_double.fixtures import FixtureLoader, bundled_fixture_dir
from stripe_double.ids import IdGenerator
from stripe_double.merge import deep_merge
from stripe_double.objects import StripeObject
from stripe_double.signing import SIGNATURE_HEADER, generate_signature_header
from stripe_double.state import MockStateStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Event catalog
# ---------------------------------------------------------------------------

# One bundled fixture per name in webhook_fixtures/
EVENT_NAMES: tuple[str, ...] = (
    "account.application.deauthorized",
    "account.updated",
    "balance.available",
    "charge.dispute.created",
    "charge.failed",
    "charge.refunded",
    "charge.succeeded",
    "charge.updated",
    "coupon.created",
    "coupon.deleted",
    "customer.created",
    "customer.deleted",
    "customer.source.created",
    "customer.subscription.created",
    "customer.subscription.deleted",
    "customer.subscription.trial_will_end",
    "customer.subscription.updated",
    "customer.updated",
    "invoice.created",
    "invoice.payment_failed",
    "invoice.payment_succeeded",
    "invoice.updated",
    "invoiceitem.created",
    "invoiceitem.deleted",
    "invoiceitem.updated",
    "plan.created",
    "plan.deleted",
    "plan.updated",
    "transfer.created",
    "transfer.paid",
)


def event_list() -> set[str]:
    """Names of the event types with a bundled fixture."""
    return set(EVENT_NAMES)


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------


class WebhookSimulator:
    """Builds webhook events from fixtures and records them in a store.

    Args:
        store: Session store receiving the ``events``.
        ids: Session id generator.
        fixture_path: Callable returning the current project fixture
            directory. Read on every call so path changes apply at once.
    """

    def __init__(
        self,
        store: MockStateStore,
        ids: IdGenerator,
        fixture_path: Callable[[], Path],
    ) -> None:
        self._store = store
        self._ids = ids
        self._fixture_path = fixture_path

    def _load_fixture(self, type_name: str) -> dict[str, Any]:
        project_dir = self._fixture_path()
        project = FixtureLoader([project_dir])
        if not project.exists(type_name) and type_name not in EVENT_NAMES:
            raise UnsupportedEventTypeError(
                f'Unsupported webhook event "{type_name}" (Searched in {project_dir})'
            )
        return FixtureLoader([project_dir, bundled_fixture_dir()]).load(type_name)

    def build_payload(
        self, type_name: str, overrides: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Build and store a webhook event payload.

        Args:
            type_name: Event type, e.g. "customer.created".
            overrides: Fields deep merged into ``data.object``. An
                ``account`` key is set on the event itself instead.

        Returns:
            The stored event dict.

        Raises:
            UnsupportedEventTypeError: If the type has no fixture.
        """
        payload = self._load_fixture(type_name)
        params = dict(overrides or {})

        if "account" in params:
            payload["account"] = params.pop("account")

        data = payload.setdefault("data", {})
        data["object"] = deep_merge(data.get("object") or {}, params)
        payload["created"] = params.get("created") or int(time.time())
        payload.setdefault("type", type_name)
        payload.setdefault("object", "event")

        event_id = self._ids.next_id("events")
        payload["id"] = event_id
        self._store.insert("events", event_id, payload)
        logger.debug("Stored webhook event %s (%s)", event_id, type_name)
        return payload

    def mock_webhook_payload(
        self, type_name: str, overrides: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return self.build_payload(type_name, overrides)

    def mock_webhook_event(
        self, type_name: str, overrides: dict[str, Any] | None = None
    ) -> StripeObject:
        """Like ``mock_webhook_payload`` but wrapped in an event view."""
        return StripeObject(self.build_payload(type_name, overrides))


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


@dataclass
class DeliveryAttempt:
    """Record of a webhook delivery attempt."""

    event_type: str
    target_url: str
    payload: dict[str, Any]
    status_code: int | None = None
    response_body: str | None = None
    error: str | None = None
    timestamp: float = field(default_factory=time.time)
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and self.status_code < 300


class WebhookDispatcher:
    """Posts signed event payloads to an application's webhook endpoint.

    Args:
        target_url: Full URL of the endpoint, e.g. "http://localhost:8000/webhooks/stripe".
        signing_secret: Endpoint secret used for the ``Stripe-Signature`` header.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        target_url: str = "http://localhost:8000/webhooks/stripe",
        *,
        signing_secret: str = "whsec_test_secret",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._target_url = target_url
        self._secret = signing_secret
        self._transport = transport
        self._delivery_log: list[DeliveryAttempt] = []

    @property
    def deliveries(self) -> list[DeliveryAttempt]:
        """All delivery attempts."""
        return list(self._delivery_log)

    def last_delivery(self) -> DeliveryAttempt | None:
        """The most recent delivery attempt."""
        return self._delivery_log[-1] if self._delivery_log else None

    def clear(self) -> None:
        """Clear delivery log."""
        self._delivery_log.clear()

    def _prepare(
        self, event: StripeObject | dict[str, Any], target_url: str | None
    ) -> tuple[DeliveryAttempt, bytes, dict[str, str]]:
        payload = event.to_dict() if isinstance(event, StripeObject) else event
        payload_bytes = json.dumps(payload).encode()
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: generate_signature_header(payload_bytes, self._secret),
        }
        attempt = DeliveryAttempt(
            event_type=str(payload.get("type", "")),
            target_url=target_url or self._target_url,
            payload=payload,
        )
        return attempt, payload_bytes, headers

    def deliver(
        self,
        event: StripeObject | dict[str, Any],
        *,
        target_url: str | None = None,
    ) -> DeliveryAttempt:
        """Deliver an event synchronously.

        Connection failures are recorded on the returned attempt rather than
        raised, so a test can assert on them.
        """
        attempt, payload_bytes, headers = self._prepare(event, target_url)

        start = time.monotonic()
        try:
            with httpx.Client(transport=self._transport) as client:
                resp = client.post(
                    attempt.target_url, content=payload_bytes, headers=headers, timeout=10.0
                )
            attempt.status_code = resp.status_code
            attempt.response_body = resp.text[:1000]
        except httpx.HTTPError as e:
            attempt.error = str(e)
            logger.warning("Webhook delivery failed for %s: %s", attempt.event_type, e)

        attempt.elapsed_ms = (time.monotonic() - start) * 1000
        self._delivery_log.append(attempt)
        return attempt

    async def deliver_async(
        self,
        event: StripeObject | dict[str, Any],
        *,
        target_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> DeliveryAttempt:
        """Deliver an event with an async client."""
        attempt, payload_bytes, headers = self._prepare(event, target_url)

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(transport=transport) as client:
                resp = await client.post(
                    attempt.target_url, content=payload_bytes, headers=headers, timeout=10.0
                )
            attempt.status_code = resp.status_code
            attempt.response_body = resp.text[:1000]
        except httpx.HTTPError as e:
            attempt.error = str(e)
            logger.warning("Webhook delivery failed for %s: %s", attempt.event_type, e)

        attempt.elapsed_ms = (time.monotonic() - start) * 1000
        self._delivery_log.append(attempt)
        return attempt
