"""
In-memory state store for mock sessions.

Keeps one insertion-ordered collection per resource kind so that resources
created through the mock API can be retrieved and listed again, matching
real API behaviour.
"""

from __future__ import annotations

import time
from typing import Any

from stripe_double.errors import DuplicateIdentityError
from stripe_double.ids import IdGenerator
from stripe_double.merge import deep_merge

# Collection name -> Stripe "object" value
RESOURCE_KINDS: dict[str, str] = {
    "events": "event",
    "customers": "customer",
    "invoices": "invoice",
    "invoiceitems": "invoiceitem",
    "plans": "plan",
    "coupons": "coupon",
    "products": "product",
    "charges": "charge",
    "subscriptions": "subscription",
}


class MockStateStore:
    """Per-session in-memory store with CRUD operations.

    Collections for the known resource kinds are also reachable as
    attributes, e.g. ``store.customers``.

    Args:
        ids: Generator used by ``create`` for new ids.
    """

    def __init__(self, ids: IdGenerator | None = None) -> None:
        self._store: dict[str, dict[str, dict[str, Any]]] = {}  # kind -> {id -> record}
        self._ids = ids or IdGenerator()

    def __getattr__(self, name: str) -> dict[str, dict[str, Any]]:
        if name in RESOURCE_KINDS:
            return self.collection(name)
        raise AttributeError(f"{type(self).__name__} has no attribute '{name}'")

    def __getitem__(self, kind: str) -> dict[str, dict[str, Any]]:
        return self.collection(kind)

    def __contains__(self, kind: str) -> bool:
        return kind in self._store

    @property
    def kinds(self) -> list[str]:
        """Kinds that have a collection, in creation order."""
        return list(self._store)

    def collection(self, kind: str) -> dict[str, dict[str, Any]]:
        """Get the live collection for a kind, creating it if needed."""
        if kind not in self._store:
            self._store[kind] = {}
        return self._store[kind]

    def insert(self, kind: str, record_id: str, record: dict[str, Any]) -> dict[str, Any]:
        """Store a record under an explicit id.

        Raises:
            DuplicateIdentityError: If the id is already taken.
        """
        collection = self.collection(kind)
        if record_id in collection:
            raise DuplicateIdentityError(f"Duplicate id '{record_id}' in '{kind}'")
        collection[record_id] = record
        return record

    def create(self, kind: str, data: dict[str, Any]) -> dict[str, Any]:
        """Store a new resource, generating its id and standard fields.

        Args:
            kind: The collection name, e.g. "customers".
            data: The request parameters.

        Returns:
            The stored record.

        Raises:
            DuplicateIdentityError: If ``data`` names an id already in use.
        """
        collection = self.collection(kind)
        record_id = data.get("id")
        if not record_id:
            record_id = self._ids.next_id(kind)
            # Skip ids a caller already claimed explicitly
            while record_id in collection:
                record_id = self._ids.next_id(kind)
        record: dict[str, Any] = {
            "id": record_id,
            "object": RESOURCE_KINDS.get(kind, kind.rstrip("s")),
            "created": int(time.time()),
            "livemode": False,
            "metadata": {},
        }
        record = deep_merge(record, data)
        record["id"] = record_id
        return self.insert(kind, record_id, record)

    def get(self, kind: str, record_id: str) -> dict[str, Any] | None:
        """Retrieve a record by id, or None if absent."""
        return self._store.get(kind, {}).get(record_id)

    def list(
        self,
        kind: str,
        limit: int | None = None,
        *,
        starting_after: str | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        """List records in insertion order.

        Args:
            kind: The collection name.
            limit: Return at most the first ``limit`` matching records.
            starting_after: Only records inserted after this id.
            **filters: Field=value filters on top-level fields.

        Returns:
            Matching records, earliest first.
        """
        records = list(self._store.get(kind, {}).values())

        if starting_after is not None:
            ids = [r.get("id") for r in records]
            if starting_after in ids:
                records = records[ids.index(starting_after) + 1 :]

        if filters:
            for key, value in filters.items():
                records = [r for r in records if r.get(key) == value]

        if limit is not None:
            records = records[: max(limit, 0)]

        return records

    def count(self, kind: str) -> int:
        return len(self._store.get(kind, {}))

    def update(self, kind: str, record_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """Deep merge ``data`` into a stored record.

        Returns:
            The updated record, or None if not found.
        """
        collection = self._store.get(kind, {})
        record = collection.get(record_id)
        if record is None:
            return None

        updated = deep_merge(record, data)
        updated["id"] = record_id
        # Keep the stored dict's identity so outstanding views stay live
        record.clear()
        record.update(updated)
        return record

    def delete(self, kind: str, record_id: str) -> bool:
        """Delete a record. Returns True if it existed."""
        collection = self._store.get(kind, {})
        if record_id in collection:
            del collection[record_id]
            return True
        return False

    def clear(self, kind: str | None = None) -> None:
        """Clear all records, or records for a specific kind."""
        if kind:
            self._store.pop(kind, None)
        else:
            self.clear_all()

    def clear_all(self) -> None:
        """Drop every collection. Only used at session boundaries."""
        self._store.clear()
