"""In-memory order id to item name mapping."""

from __future__ import annotations

import time
from collections.abc import Callable

UNKNOWN_ITEM = "Unknown"


class OrderItemMap:
    """Remember which item an order was created for until it reaches a terminal state.

    Entries for orders whose notification never arrives stay forever unless a
    `ttl_seconds` is configured, in which case stale entries are pruned lazily
    on every write.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds if ttl_seconds is None else max(ttl_seconds, 0.0)
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, order_id: object) -> bool:
        return isinstance(order_id, str) and self.get(order_id) is not None

    def remember(self, order_id: str, item_name: str) -> None:
        self.prune()
        self._entries[order_id] = (item_name, self._clock())

    def get(self, order_id: str) -> str | None:
        """Return the remembered item, or None when unknown or expired."""

        entry = self._entries.get(order_id)
        if entry is None:
            return None
        item_name, remembered_at = entry
        if self._is_expired(remembered_at):
            return None
        return item_name

    def resolve(self, order_id: str) -> str:
        """Return the remembered item or the `Unknown` sentinel."""

        return self.get(order_id) or UNKNOWN_ITEM

    def forget(self, order_id: str) -> None:
        self._entries.pop(order_id, None)

    def prune(self) -> int:
        """Drop expired entries and return how many were removed."""

        if self._ttl_seconds is None:
            return 0
        expired = [
            order_id
            for order_id, (_, remembered_at) in self._entries.items()
            if self._is_expired(remembered_at)
        ]
        for order_id in expired:
            del self._entries[order_id]
        return len(expired)

    def _is_expired(self, remembered_at: float) -> bool:
        if self._ttl_seconds is None:
            return False
        return self._clock() - remembered_at > self._ttl_seconds


__all__ = ["OrderItemMap", "UNKNOWN_ITEM"]
