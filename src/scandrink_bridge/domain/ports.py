"""Ports for the broker connection, transaction store, and payment gateway."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from scandrink_bridge.domain.entities import Command, TransactionRecord
from scandrink_bridge.domain.relay_types import BrokerConnectionState

ConnectionStateListener = Callable[[BrokerConnectionState], None]


@runtime_checkable
class BrokerConnection(Protocol):
    """Publish-capable connection to the message broker."""

    @property
    def state(self) -> BrokerConnectionState:
        """Return the current connection state."""

    def is_connected(self) -> bool:
        """Return True when a publish can be attempted."""

    async def start(self) -> None:
        """Begin connecting; must not wait for the connection to come up."""

    async def stop(self) -> None:
        """Disconnect and release the network loop."""

    async def publish(self, topic: str, payload: str, qos: int) -> bool:
        """Publish one message; return False on any delivery failure."""

    def add_state_listener(self, listener: ConnectionStateListener) -> None:
        """Register a callback invoked on the event loop for every state change."""


@runtime_checkable
class CommandSink(Protocol):
    """Accepts relay commands for eventual delivery."""

    @property
    def pending_count(self) -> int:
        """Return commands not yet delivered."""

    def enqueue(self, command: Command) -> None:
        """Queue a command; never blocks or raises."""

    async def start(self) -> None:
        """Start draining queued commands."""

    async def stop(self) -> None:
        """Stop draining; queued commands are kept."""


class TransactionRepository(Protocol):
    """Persistence port for transaction records."""

    async def create(self, record: TransactionRecord) -> None:
        """Insert a new transaction record."""

    async def update_status(self, order_id: str, status: str) -> None:
        """Update the stored status of an order."""

    async def list_transactions(self) -> list[TransactionRecord]:
        """Return all records, newest first."""

    async def close(self) -> None:
        """Release any held connections."""


class PaymentGateway(Protocol):
    """Outbound port for creating payment transactions."""

    async def create_transaction(self, parameters: dict[str, Any]) -> str:
        """Create a transaction and return its payment token."""


__all__ = [
    "BrokerConnection",
    "CommandSink",
    "ConnectionStateListener",
    "PaymentGateway",
    "TransactionRepository",
]
