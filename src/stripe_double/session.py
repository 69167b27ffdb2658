"""
Mock session lifecycle.

A session owns one store, one id generator and one request log for the span
between ``start()`` and ``stop()``. Starting swaps the API client's transport
for a mock one; stopping puts the original transport back and drops all
session state, so nothing carries over into the next session.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import httpx

from stripe_double.client import ApiClient, default_client
from stripe_double.config import StripeDoubleConfig, get_config
from stripe_double.errors import UnstartedStateError
from stripe_double.ids import IdGenerator
from stripe_double.objects import StripeObject
from stripe_double.recorder import RequestRecorder
from stripe_double.router import MockRouter
from stripe_double.state import MockStateStore
from stripe_double.transport import MockTransport
from stripe_double.webhooks import WebhookSimulator

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    STOPPED = "stopped"
    STARTED = "started"


class Session:
    """One bounded start/stop lifecycle of the test double.

    Args:
        config: Settings for this session. Defaults to the process-wide
            config, read afresh on every access.
        client: The API client to intercept. Defaults to the process-wide
            client used by the resource classes.
    """

    def __init__(
        self,
        config: StripeDoubleConfig | None = None,
        client: ApiClient | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self.state = SessionState.STOPPED
        self._store: MockStateStore | None = None
        self._ids: IdGenerator | None = None
        self._recorder: RequestRecorder | None = None
        self._simulator: WebhookSimulator | None = None
        self._original_transport: httpx.BaseTransport | None = None
        self.router = MockRouter(self)

    # -- lifecycle -----------------------------------------------------------

    @property
    def config(self) -> StripeDoubleConfig:
        return self._config if self._config is not None else get_config()

    @property
    def client(self) -> ApiClient:
        return self._client if self._client is not None else default_client()

    @property
    def is_started(self) -> bool:
        return self.state is SessionState.STARTED

    def start(self) -> Session:
        """Allocate fresh state and intercept the client. No-op if already started."""
        if self.is_started:
            return self

        self._ids = IdGenerator(prefix=self.config.id_prefix)
        self._store = MockStateStore(ids=self._ids)
        self._recorder = RequestRecorder()
        self._simulator = WebhookSimulator(self._store, self._ids, self._fixture_path)

        client = self.client
        self._original_transport = client.transport
        client.transport = MockTransport(self)

        self.state = SessionState.STARTED
        logger.info("Started mock session (fixtures: %s)", self.config.webhook_fixture_path)
        return self

    def stop(self) -> None:
        """Restore the client's transport and discard session state. Safe to repeat."""
        if not self.is_started:
            return

        client = self.client
        if isinstance(client.transport, MockTransport) and client.transport.session is self:
            assert self._original_transport is not None
            client.transport = self._original_transport
        else:
            logger.warning("Client transport was replaced during the session; leaving it as is")

        self._original_transport = None
        self._store = None
        self._ids = None
        self._recorder = None
        self._simulator = None
        self.state = SessionState.STOPPED
        logger.info("Stopped mock session")

    def __enter__(self) -> Session:
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    # -- state access --------------------------------------------------------

    def _require_started(self) -> None:
        if not self.is_started:
            raise UnstartedStateError()

    @property
    def store(self) -> MockStateStore:
        """The session store, for direct white-box assertions."""
        self._require_started()
        assert self._store is not None
        return self._store

    @property
    def ids(self) -> IdGenerator:
        self._require_started()
        assert self._ids is not None
        return self._ids

    @property
    def recorder(self) -> RequestRecorder:
        """Requests served by this session's mock transport."""
        self._require_started()
        assert self._recorder is not None
        return self._recorder

    def _fixture_path(self) -> Path:
        return self.config.webhook_fixture_path

    # -- webhooks ------------------------------------------------------------

    def mock_webhook_payload(
        self, type_name: str, overrides: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Mint and store a webhook event, returning the raw payload.

        Raises:
            UnstartedStateError: If the session is not started.
            UnsupportedEventTypeError: If no fixture exists for the type.
        """
        self._require_started()
        assert self._simulator is not None
        return self._simulator.mock_webhook_payload(type_name, overrides)

    def mock_webhook_event(
        self, type_name: str, overrides: dict[str, Any] | None = None
    ) -> StripeObject:
        """Mint and store a webhook event, returning an event view over it."""
        self._require_started()
        assert self._simulator is not None
        return self._simulator.mock_webhook_event(type_name, overrides)
