"""
Resource classes for the API surface used by application code.

Each class maps to one collection, e.g. ``Customer`` -> ``/v1/customers``.
Calls go through an ``ApiClient``, so under a started mock session they are
answered from the session store.
"""

from __future__ import annotations

from typing import Any, ClassVar
from urllib.parse import quote

from stripe_double.client import ApiClient, default_client
from stripe_double.errors import UnsupportedRequestError
from stripe_double.objects import ListObject, StripeObject, wrap


class APIResource:
    """Base class for resource endpoints."""

    kind: ClassVar[str]
    read_only: ClassVar[bool] = False

    @classmethod
    def _client(cls, client: ApiClient | None) -> ApiClient:
        return client or default_client()

    @classmethod
    def class_url(cls) -> str:
        return f"/v1/{cls.kind}"

    @classmethod
    def instance_url(cls, record_id: str) -> str:
        return f"{cls.class_url()}/{quote(record_id, safe='')}"

    @classmethod
    def retrieve(cls, record_id: str, *, client: ApiClient | None = None) -> StripeObject:
        """Fetch one resource by id.

        Raises:
            InvalidRequestError: With ``http_status == 404`` if it does not exist.
        """
        return wrap(cls._client(client).request("GET", cls.instance_url(record_id)))

    @classmethod
    def list(cls, *, client: ApiClient | None = None, **params: Any) -> ListObject:
        """List resources, earliest created first. Supports ``limit`` and ``starting_after``."""
        return ListObject(cls._client(client).request("GET", cls.class_url(), params))

    # Mirrors the older client naming
    all = list

    @classmethod
    def create(cls, *, client: ApiClient | None = None, **params: Any) -> StripeObject:
        cls._check_writable("create")
        return wrap(cls._client(client).request("POST", cls.class_url(), params))

    @classmethod
    def modify(
        cls, record_id: str, *, client: ApiClient | None = None, **params: Any
    ) -> StripeObject:
        cls._check_writable("modify")
        return wrap(cls._client(client).request("POST", cls.instance_url(record_id), params))

    @classmethod
    def delete(cls, record_id: str, *, client: ApiClient | None = None) -> StripeObject:
        cls._check_writable("delete")
        return wrap(cls._client(client).request("DELETE", cls.instance_url(record_id)))

    @classmethod
    def _check_writable(cls, operation: str) -> None:
        if cls.read_only:
            raise UnsupportedRequestError(f"{cls.__name__}.{operation} is not supported")


class Event(APIResource):
    kind = "events"
    read_only = True


class Customer(APIResource):
    kind = "customers"


class Plan(APIResource):
    kind = "plans"


class Coupon(APIResource):
    kind = "coupons"


class Product(APIResource):
    kind = "products"


class Invoice(APIResource):
    kind = "invoices"


class InvoiceItem(APIResource):
    kind = "invoiceitems"


class Charge(APIResource):
    kind = "charges"


class Subscription(APIResource):
    kind = "subscriptions"
