"""Shared pytest fixtures for stripe-double tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

import stripe_double
from stripe_double.client import ApiClient
from stripe_double.config import StripeDoubleConfig, get_config, set_config
from stripe_double.session import Session

TESTS_DIR = Path(__file__).parent


@pytest.fixture
def project_fixture_dir() -> Path:
    """Project-level webhook fixtures used by the tests."""
    return TESTS_DIR / "fixtures" / "stripe_webhooks"


@pytest.fixture
def dummy_fixture_dir() -> Path:
    return TESTS_DIR / "_dummy" / "webhooks"


@pytest.fixture(autouse=True)
def isolated_config(project_fixture_dir: Path) -> Generator[StripeDoubleConfig, None, None]:
    """Give every test its own process-wide config and a stopped default session."""
    config = StripeDoubleConfig(webhook_fixture_path=project_fixture_dir)
    previous = set_config(config)
    yield get_config()
    stripe_double.stop()
    set_config(previous)


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STRIPE_API_KEY", raising=False)


@pytest.fixture
def client() -> ApiClient:
    """A private client so tests do not touch the process-wide one."""
    return ApiClient()


@pytest.fixture
def session(client: ApiClient) -> Generator[Session, None, None]:
    """A started session intercepting ``client``."""
    with Session(client=client) as started:
        yield started
