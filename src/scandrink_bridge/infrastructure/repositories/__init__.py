"""Repository implementations."""

from scandrink_bridge.infrastructure.repositories.in_memory_transaction_repository import (
    InMemoryTransactionRepository,
)
from scandrink_bridge.infrastructure.repositories.postgres_transaction_repository import (
    PostgresTransactionRepository,
)

__all__ = ["InMemoryTransactionRepository", "PostgresTransactionRepository"]
