"""
Transports for the API client.

``LiveTransport`` talks to the real API over the network. ``MockTransport``
answers the same requests from a mock session, so application code that
goes through an ``ApiClient`` cannot tell the two apart.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from stripe_double.encoding import decode_params

if TYPE_CHECKING:
    from stripe_double.session import Session

logger = logging.getLogger(__name__)

# Request extension carrying un-encoded params from ApiClient to MockTransport
PARAMS_EXTENSION = "stripe_double.params"


class LiveTransport(httpx.HTTPTransport):
    """The real network path. Requests need an API key."""

    requires_api_key = True


class MockTransport(httpx.BaseTransport):
    """Serves requests from a session's router and records them.

    Requests sent by an ``ApiClient`` carry their original params in the
    ``PARAMS_EXTENSION`` request extension, so values keep their Python
    types. Other requests are decoded from the query string and form body.

    Args:
        session: The started session answering requests.
    """

    requires_api_key = False

    def __init__(self, session: Session) -> None:
        self.session = session

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        method = request.method.upper()
        path = request.url.path
        params = self._params(request)

        with self.session.recorder.capture(method, path, params) as entry:
            status, payload = self.session.router.dispatch(method, path, params)
            entry.status = status

        logger.debug("Mocked %s %s -> %d", method, path, status)
        return httpx.Response(
            status,
            content=json.dumps(payload).encode(),
            headers={"Content-Type": "application/json", "Request-Id": "req_mock"},
            request=request,
        )

    def _params(self, request: httpx.Request) -> dict[str, Any]:
        typed = request.extensions.get(PARAMS_EXTENSION)
        if typed is not None:
            return copy.deepcopy(typed)
        params = decode_params(request.url.query.decode())
        body = request.read()
        if body:
            params.update(decode_params(body.decode()))
        return params


def requires_api_key(transport: Any) -> bool:
    """Whether requests through ``transport`` must carry an API key."""
    return bool(getattr(transport, "requires_api_key", True))
