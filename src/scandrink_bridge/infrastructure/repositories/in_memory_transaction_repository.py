"""In-memory repository implementation for transactions."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime

from scandrink_bridge.domain.entities import TransactionRecord
from scandrink_bridge.domain.ports import TransactionRepository


class InMemoryTransactionRepository(TransactionRepository):
    """Simple repository for local development and tests."""

    def __init__(self) -> None:
        self._by_order_id: dict[str, TransactionRecord] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: TransactionRecord) -> None:
        """Insert a record, overwriting any record with the same order id."""

        created_at = record.created_at or datetime.now(tz=UTC)
        async with self._lock:
            self._by_order_id.pop(record.order_id, None)
            self._by_order_id[record.order_id] = replace(record, created_at=created_at)

    async def update_status(self, order_id: str, status: str) -> None:
        """Update status of one order; unknown orders are ignored."""

        async with self._lock:
            record = self._by_order_id.get(order_id)
            if record is not None:
                record.status = status

    async def list_transactions(self) -> list[TransactionRecord]:
        """Return copies of all records, newest first."""

        async with self._lock:
            return [replace(record) for record in reversed(self._by_order_id.values())]

    async def close(self) -> None:
        return None


__all__ = ["InMemoryTransactionRepository"]
