"""
Pytest fixtures for the Stripe test double.

Registered as a pytest plugin via the pyproject.toml entry point::

    [project.entry-points."pytest11"]
    stripe_double = "stripe_double.pytest_plugin"
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

import stripe_double
from stripe_double.session import Session
from stripe_double.state import MockStateStore

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture()
def stripe_mock() -> Generator[Session, None, None]:
    """Start the default mock session for one test.

    The default API client is intercepted for the duration of the test and
    the store is discarded afterwards.

    Yields:
        The started default Session.
    """
    session = stripe_double.start()
    yield session
    stripe_double.stop()


@pytest.fixture()
def stripe_store(stripe_mock: Session) -> MockStateStore:
    """The store of the running mock session."""
    return stripe_mock.store
