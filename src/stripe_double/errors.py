"""
Error types for the Stripe test double.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorKind(str, Enum):
    """Machine-readable category carried by every error."""

    UNSUPPORTED_REQUEST = "unsupported_request"
    UNSUPPORTED_EVENT_TYPE = "unsupported_event_type"
    FIXTURE_NOT_FOUND = "fixture_not_found"
    DUPLICATE_IDENTITY = "duplicate_identity"
    UNSTARTED = "unstarted"
    API_ERROR = "api_error"
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    API_CONNECTION = "api_connection"
    SIGNATURE_VERIFICATION = "signature_verification"


class StripeDoubleError(Exception):
    """Base exception for all stripe-double errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.API_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedRequestError(StripeDoubleError):
    """
    Raised when the mock has no handler for a request.

    Examples:
    - Unknown method/path pair with strict routing enabled
    - Creating or deleting events directly
    """

    kind = ErrorKind.UNSUPPORTED_REQUEST


class UnsupportedEventTypeError(UnsupportedRequestError):
    """Raised when a webhook event type is neither in the catalog nor in the project fixtures."""

    kind = ErrorKind.UNSUPPORTED_EVENT_TYPE


class FixtureNotFoundError(StripeDoubleError):
    """Raised when no search path yields a fixture file."""

    kind = ErrorKind.FIXTURE_NOT_FOUND

    def __init__(self, name: str, searched: list[str]):
        self.name = name
        self.searched = searched
        super().__init__(f"Fixture '{name}' not found (searched: {', '.join(searched)})")


class DuplicateIdentityError(StripeDoubleError):
    """
    Raised when a store insert collides with an existing id.

    Ids come from a per-session counter, so this means the generator is
    broken. The session should not be used further.
    """

    kind = ErrorKind.DUPLICATE_IDENTITY


class UnstartedStateError(StripeDoubleError):
    """Raised when an operation needs a started session."""

    kind = ErrorKind.UNSTARTED

    def __init__(self, message: str = "The mock session has not been started. Call start() first."):
        super().__init__(message)


class StripeError(StripeDoubleError):
    """An error response from the (real or mocked) API."""

    kind = ErrorKind.API_ERROR

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        code: str | None = None,
        json_body: dict[str, Any] | None = None,
    ):
        self.http_status = http_status
        self.code = code
        self.json_body = json_body
        super().__init__(message)


class InvalidRequestError(StripeError):
    """
    Raised for 4xx responses such as missing resources.

    A 404 ``resource_missing`` is the normal "absent" result of a lookup,
    mirroring the real API.
    """

    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, param: str | None = None, **kwargs: Any):
        self.param = param
        super().__init__(message, **kwargs)

    @property
    def is_not_found(self) -> bool:
        return self.http_status == 404


class AuthenticationError(StripeError):
    """Raised when no usable API key is available."""

    kind = ErrorKind.AUTHENTICATION


class APIConnectionError(StripeError):
    """Raised when the live transport cannot reach the API."""

    kind = ErrorKind.API_CONNECTION


class SignatureVerificationError(StripeDoubleError):
    """Raised when a webhook signature header does not match its payload."""

    kind = ErrorKind.SIGNATURE_VERIFICATION

    def __init__(self, message: str, sig_header: str | None = None):
        self.sig_header = sig_header
        super().__init__(message)


def error_kind(exc: BaseException) -> ErrorKind | None:
    """Return the kind of a stripe-double error, with 404s reported as NOT_FOUND."""
    if isinstance(exc, InvalidRequestError) and exc.is_not_found:
        return ErrorKind.NOT_FOUND
    if isinstance(exc, StripeDoubleError):
        return exc.kind
    return None
