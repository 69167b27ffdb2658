"""
Synthetic id generation.

Ids look like ``test_evt_12``: a test-origin prefix, the Stripe object prefix
for the resource kind, and a counter shared by every kind in the session.
"""

from __future__ import annotations

import itertools
import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_ID_PREFIX = "test_"

# Resource kind (collection name) -> Stripe object id prefix
KIND_PREFIXES: dict[str, str] = {
    "events": "evt",
    "customers": "cus",
    "invoices": "in",
    "invoiceitems": "ii",
    "plans": "plan",
    "coupons": "coupon",
    "products": "prod",
    "charges": "ch",
    "subscriptions": "sub",
}


def kind_prefix(kind: str) -> str:
    return KIND_PREFIXES.get(kind, kind[:3].lower())


class IdGenerator:
    """Hands out ids that never repeat within one generator.

    Args:
        prefix: Marks ids as generated by the test double.
    """

    def __init__(self, prefix: str = DEFAULT_ID_PREFIX) -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next_id(self, kind: str) -> str:
        """Generate the next id for a resource kind."""
        new_id = f"{self.prefix}{kind_prefix(kind)}_{next(self._counter)}"
        logger.debug("Generated id %s for %s", new_id, kind)
        return new_id

    def pattern(self, kind: str) -> re.Pattern[str]:
        """Regex matching ids this generator produces for ``kind``."""
        return re.compile(rf"^{re.escape(self.prefix)}{re.escape(kind_prefix(kind))}_[0-9]+$")


def is_test_id(value: str, prefix: str = DEFAULT_ID_PREFIX) -> bool:
    """Whether an id was minted by the test double."""
    return isinstance(value, str) and value.startswith(prefix)
