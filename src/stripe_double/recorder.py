"""
Request log for mock sessions.

Each API request a session answers, through the mock transport or the HTTP
mock server, becomes a ``RecordedRequest``. Tests query the log by resource
kind, record id and params rather than by raw URL:

    session.recorder.assert_called("customers", "POST", email="jenny@example.com")
    session.recorder.assert_not_called("invoices", "DELETE")
"""

from __future__ import annotations

import re
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from stripe_double.errors import StripeDoubleError

_PATH_RE = re.compile(r"^/v1/(?P<kind>[a-z_]+)(?:/(?P<record_id>[^/]+))?/?$")


@dataclass
class RecordedRequest:
    """One request answered by a mock session."""

    method: str
    path: str
    params: dict[str, Any]
    status: int | None = None
    error: str | None = None
    timestamp: float = field(default_factory=time.time)
    elapsed_ms: float = 0.0

    @property
    def kind(self) -> str | None:
        """Resource kind from the path, e.g. "customers"."""
        match = _PATH_RE.match(self.path)
        return match.group("kind") if match else None

    @property
    def record_id(self) -> str | None:
        """Record id from the path, or None for collection requests."""
        match = _PATH_RE.match(self.path)
        return match.group("record_id") if match else None

    def matches(
        self,
        kind: str | None = None,
        method: str | None = None,
        *,
        record_id: str | None = None,
        status: int | None = None,
        params: dict[str, Any] | None = None,
    ) -> bool:
        if kind is not None and self.kind != kind:
            return False
        if method is not None and self.method != method.upper():
            return False
        if record_id is not None and self.record_id != record_id:
            return False
        if status is not None and self.status != status:
            return False
        for key, value in (params or {}).items():
            if key not in self.params or self.params[key] != value:
                return False
        return True

    def describe(self) -> str:
        return f"{self.method} {self.path} -> {self.status if self.error is None else self.error}"


class RequestRecorder:
    """The request log of one session."""

    def __init__(self) -> None:
        self._log: list[RecordedRequest] = []

    @contextmanager
    def capture(
        self, method: str, path: str, params: dict[str, Any]
    ) -> Iterator[RecordedRequest]:
        """Record the request handled inside the block.

        The caller sets ``status`` on the yielded entry. A library error
        escaping the block is noted on the entry and re-raised.
        """
        entry = RecordedRequest(method=method.upper(), path=path, params=params)
        start = time.monotonic()
        try:
            yield entry
        except StripeDoubleError as e:
            entry.error = e.kind.value
            raise
        finally:
            entry.elapsed_ms = round((time.monotonic() - start) * 1000, 2)
            self._log.append(entry)

    def record(self, entry: RecordedRequest) -> None:
        self._log.append(entry)

    @property
    def requests(self) -> list[RecordedRequest]:
        return list(self._log)

    @property
    def request_count(self) -> int:
        return len(self._log)

    @property
    def last_request(self) -> RecordedRequest | None:
        return self._log[-1] if self._log else None

    def calls(
        self,
        kind: str | None = None,
        method: str | None = None,
        *,
        record_id: str | None = None,
        status: int | None = None,
        **params: Any,
    ) -> list[RecordedRequest]:
        """Requests matching every given criterion.

        Args:
            kind: Resource kind, e.g. "customers".
            method: HTTP method, case-insensitive.
            record_id: Id from the request path.
            status: Response status.
            **params: Top-level request params that must be present with
                these values.
        """
        return [
            r
            for r in self._log
            if r.matches(kind, method, record_id=record_id, status=status, params=params)
        ]

    def assert_called(
        self,
        kind: str,
        method: str | None = None,
        *,
        record_id: str | None = None,
        times: int | None = None,
        **params: Any,
    ) -> None:
        """Assert a matching request was made, exactly ``times`` times if given."""
        found = len(self.calls(kind, method, record_id=record_id, **params))
        wanted = " ".join(filter(None, [method, kind, record_id]))
        if params:
            wanted += f" with {params}"
        seen = [r.describe() for r in self._log]
        if times is None:
            assert found > 0, f"No {wanted} request was made. Seen: {seen}"
        else:
            assert found == times, f"Expected {times} {wanted} request(s), saw {found}: {seen}"

    def assert_not_called(self, kind: str, method: str | None = None, **params: Any) -> None:
        found = self.calls(kind, method, **params)
        assert not found, f"Unexpected requests: {[r.describe() for r in found]}"

    def clear(self) -> None:
        self._log.clear()
