"""PostgreSQL repository implementation for transactions."""

from __future__ import annotations

import asyncio
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from scandrink_bridge.domain.entities import TransactionRecord
from scandrink_bridge.domain.errors import (
    TransactionPersistenceError,
    TransactionStoreUnavailableError,
)
from scandrink_bridge.domain.ports import TransactionRepository

_SELECT_COLUMNS = """
    order_id,
    item_name,
    price,
    status,
    created_at
"""

_QUERY_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresTransactionRepository(TransactionRepository):
    """Transaction repository backed by PostgreSQL."""

    def __init__(
        self,
        dsn: str,
        min_pool_size: int = 1,
        max_pool_size: int = 10,
    ) -> None:
        self._dsn = dsn
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    async def create(self, record: TransactionRecord) -> None:
        """Insert a record, overwriting any row with the same order id."""

        pool = await self._get_pool()
        try:
            await pool.execute(
                """
                INSERT INTO transactions (order_id, item_name, price, status)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (order_id) DO UPDATE SET
                    item_name = EXCLUDED.item_name,
                    price = EXCLUDED.price,
                    status = EXCLUDED.status
                """,
                record.order_id,
                record.item_name,
                record.price,
                record.status,
            )
        except _QUERY_ERRORS as exc:
            raise TransactionPersistenceError(
                f"Failed to insert transaction {record.order_id}: {exc}"
            ) from exc

    async def update_status(self, order_id: str, status: str) -> None:
        """Update status of one order; unknown orders are ignored."""

        pool = await self._get_pool()
        try:
            await pool.execute(
                "UPDATE transactions SET status = $2 WHERE order_id = $1",
                order_id,
                status,
            )
        except _QUERY_ERRORS as exc:
            raise TransactionPersistenceError(
                f"Failed to update transaction {order_id}: {exc}"
            ) from exc

    async def list_transactions(self) -> list[TransactionRecord]:
        """Return all records, newest first."""

        pool = await self._get_pool()
        try:
            rows = await pool.fetch(
                f"SELECT {_SELECT_COLUMNS} FROM transactions ORDER BY id DESC",
            )
        except _QUERY_ERRORS as exc:
            raise TransactionPersistenceError(f"Failed to list transactions: {exc}") from exc
        return [self._to_entity(row) for row in rows]

    async def close(self) -> None:
        """Close the pool if it was initialized."""

        pool = self._pool
        self._pool = None
        if pool is not None:
            await pool.close()

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool

        async with self._pool_lock:
            if self._pool is None:
                try:
                    pool = await asyncpg.create_pool(
                        dsn=self._dsn,
                        min_size=self._min_pool_size,
                        max_size=self._max_pool_size,
                    )
                    await self._ensure_schema(pool)
                except _QUERY_ERRORS as exc:
                    raise TransactionStoreUnavailableError(
                        f"Transaction database is unavailable: {exc}"
                    ) from exc
                self._pool = pool
        assert self._pool is not None
        return self._pool

    async def _ensure_schema(self, pool: asyncpg.Pool) -> None:
        await pool.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id BIGSERIAL PRIMARY KEY,
                order_id VARCHAR(100) UNIQUE NOT NULL,
                item_name VARCHAR(100) NOT NULL,
                price INTEGER NOT NULL,
                status VARCHAR(50) NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        )

    def _to_entity(self, row: Any) -> TransactionRecord:
        return TransactionRecord(
            order_id=row["order_id"],
            item_name=row["item_name"],
            price=row["price"],
            status=row["status"],
            created_at=row["created_at"],
        )


__all__ = ["PostgresTransactionRepository"]
