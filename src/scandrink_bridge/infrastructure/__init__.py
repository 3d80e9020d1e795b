"""Infrastructure layer public API."""

from scandrink_bridge.infrastructure.broker import MqttBrokerConnection, NoopBrokerConnection
from scandrink_bridge.infrastructure.dispatch import CommandDispatcher
from scandrink_bridge.infrastructure.payments import MidtransSnapClient
from scandrink_bridge.infrastructure.repositories import (
    InMemoryTransactionRepository,
    PostgresTransactionRepository,
)

__all__ = [
    "CommandDispatcher",
    "InMemoryTransactionRepository",
    "MidtransSnapClient",
    "MqttBrokerConnection",
    "NoopBrokerConnection",
    "PostgresTransactionRepository",
]
