"""
Request router for mock sessions.

Maps ``(method, path, params)`` onto store operations and returns
``(status, body)`` pairs shaped like real API responses. Used by the
in-process mock transport and by the HTTP mock server.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from stripe_double.errors import UnsupportedRequestError
from stripe_double.state import RESOURCE_KINDS

if TYPE_CHECKING:
    from stripe_double.session import Session

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100
_INT_RE = re.compile(r"^-?[0-9]+$")

# Kinds that can only be read through the API; events are minted by the simulator
READ_ONLY_KINDS = frozenset({"events"})
CUSTOMER_SCOPED_KINDS = frozenset({"invoices", "invoiceitems", "charges", "subscriptions"})

Response = tuple[int, dict[str, Any]]
Handler = Callable[..., Response]


def error_body(
    message: str,
    *,
    param: str | None = None,
    code: str | None = None,
    error_type: str = "invalid_request_error",
) -> dict[str, Any]:
    error: dict[str, Any] = {"type": error_type, "message": message}
    if param:
        error["param"] = param
    if code:
        error["code"] = code
    return {"error": error}


class MockRouter:
    """Dispatches API requests to a session's store.

    Args:
        session: The owning session. Its store and config are read per request.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._routes: list[tuple[str, re.Pattern[str], Handler]] = [
            ("GET", re.compile(r"^/v1/(?P<kind>[a-z_]+)$"), self._list),
            ("POST", re.compile(r"^/v1/(?P<kind>[a-z_]+)$"), self._create),
            ("GET", re.compile(r"^/v1/(?P<kind>[a-z_]+)/(?P<record_id>[^/]+)$"), self._retrieve),
            ("POST", re.compile(r"^/v1/(?P<kind>[a-z_]+)/(?P<record_id>[^/]+)$"), self._update),
            ("DELETE", re.compile(r"^/v1/(?P<kind>[a-z_]+)/(?P<record_id>[^/]+)$"), self._delete),
        ]

    def dispatch(self, method: str, path: str, params: dict[str, Any] | None = None) -> Response:
        """Route a request.

        Unrecognized requests log a warning and return an empty body, unless
        the session config enables ``strict_routing``.

        Raises:
            UnsupportedRequestError: For unrecognized requests in strict mode,
                or writes to read-only kinds.
        """
        method = method.upper()
        params = params or {}
        path = "/" + path.strip("/") if path.strip("/") else "/"

        for route_method, pattern, handler in self._routes:
            if route_method != method:
                continue
            match = pattern.match(path)
            if match and match.group("kind") in RESOURCE_KINDS:
                return handler(params=params, **match.groupdict())

        if self._session.config.strict_routing:
            raise UnsupportedRequestError(f"Unrecognized endpoint + method: [{method} {path}]")
        logger.warning("Unrecognized endpoint + method: [%s %s]", method, path)
        if params:
            logger.warning("Params: %s", params)
        return 200, {}

    def _not_found(self, kind: str, record_id: str) -> Response:
        return 404, error_body(
            f"No such {RESOURCE_KINDS[kind]}: '{record_id}'",
            param="id",
            code="resource_missing",
        )

    def _require_writable(self, kind: str, method: str) -> None:
        if kind in READ_ONLY_KINDS:
            raise UnsupportedRequestError(
                f"{method} is not supported for {kind}; use mock_webhook_event() to create events"
            )

    def _list(self, kind: str, params: dict[str, Any]) -> Response:
        config = self._session.config
        limit = params.get("limit", config.default_list_limit)
        # Form-encoded requests carry the limit as a string
        if isinstance(limit, str) and _INT_RE.match(limit):
            limit = int(limit)
        if not isinstance(limit, int) or isinstance(limit, bool):
            return 400, error_body(f"Invalid integer: {limit}", param="limit")
        limit = min(max(limit, 1), MAX_LIST_LIMIT)

        store = self._session.store
        starting_after = params.get("starting_after")
        if starting_after is not None and store.get(kind, starting_after) is None:
            return 404, error_body(
                f"No such {RESOURCE_KINDS[kind]}: '{starting_after}'",
                param="starting_after",
                code="resource_missing",
            )

        filters: dict[str, Any] = {}
        if kind == "events" and "type" in params:
            filters["type"] = params["type"]
        if kind in CUSTOMER_SCOPED_KINDS and "customer" in params:
            filters["customer"] = params["customer"]

        # One extra record tells us whether there is another page
        records = store.list(kind, limit + 1, starting_after=starting_after, **filters)
        return 200, {
            "object": "list",
            "url": f"/v1/{kind}",
            "has_more": len(records) > limit,
            "data": records[:limit],
        }

    def _create(self, kind: str, params: dict[str, Any]) -> Response:
        self._require_writable(kind, "POST")
        store = self._session.store
        requested_id = params.get("id")
        if requested_id and store.get(kind, requested_id) is not None:
            return 400, error_body(
                f"{RESOURCE_KINDS[kind].capitalize()} already exists: '{requested_id}'",
                param="id",
                code="resource_already_exists",
            )
        return 200, store.create(kind, params)

    def _retrieve(self, kind: str, record_id: str, params: dict[str, Any]) -> Response:
        record = self._session.store.get(kind, record_id)
        if record is None:
            return self._not_found(kind, record_id)
        return 200, record

    def _update(self, kind: str, record_id: str, params: dict[str, Any]) -> Response:
        self._require_writable(kind, "POST")
        record = self._session.store.update(kind, record_id, params)
        if record is None:
            return self._not_found(kind, record_id)
        return 200, record

    def _delete(self, kind: str, record_id: str, params: dict[str, Any]) -> Response:
        self._require_writable(kind, "DELETE")
        if not self._session.store.delete(kind, record_id):
            return self._not_found(kind, record_id)
        return 200, {"id": record_id, "object": RESOURCE_KINDS[kind], "deleted": True}
