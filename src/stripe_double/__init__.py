"""
stripe-double - a local test double for the Stripe API.

Serves API calls from an in-memory, per-session store and mints webhook
events from JSON fixtures, so payment code paths can be tested without
network access.

Usage:
    import stripe_double
    from stripe_double.resources import Event

    stripe_double.start()
    event = stripe_double.mock_webhook_event("customer.created", {"account_balance": 500})
    assert Event.retrieve(event.id).type == "customer.created"
    stripe_double.stop()
"""

from __future__ import annotations

from typing import Any

from stripe_double.client import ApiClient, default_client
from stripe_double.config import (
    StripeDoubleConfig,
    get_config,
    get_webhook_fixture_path,
    load_config,
    set_config,
    set_webhook_fixture_path,
)
from stripe_double.errors import (
    AuthenticationError,
    DuplicateIdentityError,
    ErrorKind,
    FixtureNotFoundError,
    InvalidRequestError,
    SignatureVerificationError,
    StripeDoubleError,
    StripeError,
    UnstartedStateError,
    UnsupportedEventTypeError,
    UnsupportedRequestError,
)
from stripe_double.merge import deep_merge
from stripe_double.objects import ListObject, StripeObject
from stripe_double.session import Session, SessionState
from stripe_double.state import MockStateStore
from stripe_double.webhooks import event_list

__version__ = "0.1.0"

_session: Session | None = None


def start(config: StripeDoubleConfig | None = None) -> Session:
    """Start the default session, replacing the default client's transport."""
    global _session
    if _session is not None and _session.is_started:
        return _session
    _session = Session(config=config)
    return _session.start()


def stop() -> None:
    """Stop the default session. Safe to call when nothing is running."""
    if _session is not None:
        _session.stop()


def current_session() -> Session:
    """The started default session.

    Raises:
        UnstartedStateError: If ``start()`` has not been called.
    """
    if _session is None or not _session.is_started:
        raise UnstartedStateError()
    return _session


def instance() -> MockStateStore:
    """The default session's store."""
    return current_session().store


def mock_webhook_event(type_name: str, overrides: dict[str, Any] | None = None) -> StripeObject:
    return current_session().mock_webhook_event(type_name, overrides)


def mock_webhook_payload(type_name: str, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    return current_session().mock_webhook_payload(type_name, overrides)


__all__ = [
    "__version__",
    "ApiClient",
    "AuthenticationError",
    "DuplicateIdentityError",
    "ErrorKind",
    "FixtureNotFoundError",
    "InvalidRequestError",
    "ListObject",
    "MockStateStore",
    "Session",
    "SessionState",
    "SignatureVerificationError",
    "StripeDoubleConfig",
    "StripeDoubleError",
    "StripeError",
    "StripeObject",
    "UnstartedStateError",
    "UnsupportedEventTypeError",
    "UnsupportedRequestError",
    "current_session",
    "deep_merge",
    "default_client",
    "event_list",
    "get_config",
    "get_webhook_fixture_path",
    "instance",
    "load_config",
    "mock_webhook_event",
    "mock_webhook_payload",
    "set_config",
    "set_webhook_fixture_path",
    "start",
    "stop",
]
