"""
A small Stripe-like API client.

Application code sends requests through an ``ApiClient``; a mock session
swaps the client's transport to serve those requests locally.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from stripe_double.encoding import encode_params
from stripe_double.errors import (
    APIConnectionError,
    AuthenticationError,
    InvalidRequestError,
    StripeError,
)
from stripe_double.transport import PARAMS_EXTENSION, LiveTransport, requires_api_key

logger = logging.getLogger(__name__)

API_VERSION = "2024-06-20"
DEFAULT_API_BASE = "https://api.stripe.com"


class ApiClient:
    """Sends API requests through a swappable transport.

    Args:
        api_key: Secret key. Defaults to the ``STRIPE_API_KEY`` environment variable.
        api_base: Base URL of the API.
        transport: httpx transport; a ``LiveTransport`` if omitted.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_base: str = DEFAULT_API_BASE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self.api_base = api_base.rstrip("/")
        self._transport: httpx.BaseTransport = transport or LiveTransport()
        self._http = self._build_http()

    def _build_http(self) -> httpx.Client:
        return httpx.Client(base_url=self.api_base, transport=self._transport, timeout=80.0)

    @property
    def api_key(self) -> str | None:
        return self._api_key or os.environ.get("STRIPE_API_KEY")

    @api_key.setter
    def api_key(self, value: str | None) -> None:
        self._api_key = value

    @property
    def transport(self) -> httpx.BaseTransport:
        return self._transport

    @transport.setter
    def transport(self, transport: httpx.BaseTransport) -> None:
        # The previous transport is left open; a session restores it on stop
        self._transport = transport
        self._http = self._build_http()

    def request(
        self, method: str, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises:
            AuthenticationError: If the transport needs a key and none is set.
            InvalidRequestError: For 400/404 responses.
            APIConnectionError: If the network request fails.
            StripeError: For other error responses.
        """
        method = method.upper()
        headers = {"Stripe-Version": API_VERSION}
        if requires_api_key(self._transport):
            if not self.api_key:
                raise AuthenticationError(
                    "No API key provided. Set ApiClient.api_key or STRIPE_API_KEY.",
                    http_status=None,
                )
            headers["Authorization"] = f"Bearer {self.api_key}"

        params = params or {}
        pairs = encode_params(params)
        extensions = {PARAMS_EXTENSION: params}
        try:
            if method in ("GET", "DELETE"):
                resp = self._http.request(
                    method, path, params=pairs, headers=headers, extensions=extensions
                )
            else:
                resp = self._http.request(
                    method, path, data=dict(pairs), headers=headers, extensions=extensions
                )
        except httpx.TransportError as e:
            raise APIConnectionError(f"Could not connect to {self.api_base}: {e}") from e

        body: dict[str, Any] = resp.json() if resp.content else {}
        if resp.status_code >= 400:
            raise _error_from_response(resp.status_code, body)
        return body

    def close(self) -> None:
        self._http.close()


def _error_from_response(status: int, body: dict[str, Any]) -> StripeError:
    error = body.get("error", {}) if isinstance(body, dict) else {}
    message = error.get("message", f"Request failed with status {status}")
    code = error.get("code")
    if status in (400, 404):
        return InvalidRequestError(
            message, error.get("param"), http_status=status, code=code, json_body=body
        )
    if status == 401:
        return AuthenticationError(message, http_status=status, code=code, json_body=body)
    return StripeError(message, http_status=status, code=code, json_body=body)


_default_client: ApiClient | None = None


def default_client() -> ApiClient:
    """The process-wide client used by resource classes."""
    global _default_client
    if _default_client is None:
        _default_client = ApiClient()
    return _default_client
