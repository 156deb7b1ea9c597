"""After-commit hooks for cache invalidation and stock notifications.

Both hooks are deferred with ``transaction.on_commit`` so a rolled back
mutation never evicts caches or notifies subscribers.
"""

import logging

from django.core.cache import cache
from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger("stockroute.events")

INVENTORY_KEY = "/api/inventory"
INVENTORY_STATS_KEY = "/api/inventory/stats"
LOCATIONS_KEY = "/api/locations"

INVENTORY_KEYS = (INVENTORY_KEY, INVENTORY_STATS_KEY)
STOCK_KEYS = (INVENTORY_KEY, INVENTORY_STATS_KEY, LOCATIONS_KEY)

# Receivers get ``event`` (e.g. "product-moved") and ``payload`` (dict of ids/quantities).
stock_event = Signal()


def cache_key(logical_key: str) -> str:
    return f"stockroute:{logical_key}"


def invalidate_caches(*keys: str) -> None:
    """Evict the given logical cache keys once the current transaction commits."""

    def _evict():
        cache.delete_many([cache_key(k) for k in keys])
        logger.debug("cache.invalidated", extra={"event": "cache.invalidated", "keys": list(keys)})

    transaction.on_commit(_evict)


def emit_event(event: str, **payload) -> None:
    """Publish a stock event to ``stock_event`` receivers after commit."""

    def _send():
        try:
            stock_event.send(sender=None, event=event, payload=payload)
        except Exception:
            # Subscribers must never undo a committed mutation
            logger.exception("stock_event.failed", extra={"event": "stock_event.failed", "name": event})

    transaction.on_commit(_send)


# EOF
