from __future__ import annotations

import asyncio
import json
from collections import deque
from collections.abc import Callable
from typing import Any

import pytest

from scandrink_bridge.application.services import PaymentBridgeService
from scandrink_bridge.domain.catalog import ItemCatalog
from scandrink_bridge.domain.entities import Command, TransactionRecord
from scandrink_bridge.domain.errors import PaymentGatewayError
from scandrink_bridge.domain.order_items import OrderItemMap
from scandrink_bridge.domain.relay_types import BrokerConnectionState
from scandrink_bridge.domain.signature import compute_signature, normalize_gross_amount
from scandrink_bridge.infrastructure.repositories import InMemoryTransactionRepository

SERVER_KEY = "SB-Mid-server-test"
ADMIN_TOKEN = "admin-secret"


class FakeBrokerConnection:
    """Scriptable broker connection that records every publish attempt."""

    def __init__(
        self,
        connected: bool = True,
        outcomes: list[bool | Exception] | None = None,
        ack_delay_seconds: float = 0.0,
    ) -> None:
        self._state = (
            BrokerConnectionState.CONNECTED if connected else BrokerConnectionState.DISCONNECTED
        )
        self.outcomes: deque[bool | Exception] = deque(outcomes or [])
        self.ack_delay_seconds = ack_delay_seconds
        self.listeners: list[Callable[[BrokerConnectionState], None]] = []
        self.attempts: list[dict[str, Any]] = []
        self.published: list[dict[str, Any]] = []
        self.topics: list[tuple[str, int]] = []
        self.active_publishes = 0
        self.max_active_publishes = 0

    @property
    def state(self) -> BrokerConnectionState:
        return self._state

    def is_connected(self) -> bool:
        return self._state is BrokerConnectionState.CONNECTED

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    def add_state_listener(self, listener: Callable[[BrokerConnectionState], None]) -> None:
        if listener not in self.listeners:
            self.listeners.append(listener)

    def set_state(self, state: BrokerConnectionState) -> None:
        self._state = state
        for listener in list(self.listeners):
            listener(state)

    async def publish(self, topic: str, payload: str, qos: int) -> bool:
        self.active_publishes += 1
        self.max_active_publishes = max(self.max_active_publishes, self.active_publishes)
        try:
            await asyncio.sleep(self.ack_delay_seconds)
            message = json.loads(payload)
            self.attempts.append(message)
            self.topics.append((topic, qos))
            outcome = self.outcomes.popleft() if self.outcomes else True
            if isinstance(outcome, Exception):
                raise outcome
            if outcome:
                self.published.append(message)
            return outcome
        finally:
            self.active_publishes -= 1


class RecordingDispatcher:
    """Command sink that keeps enqueued commands without delivering them."""

    def __init__(self) -> None:
        self.commands: list[Command] = []
        self.started = False
        self.stopped = False

    @property
    def pending_count(self) -> int:
        return len(self.commands)

    def enqueue(self, command: Command) -> None:
        self.commands.append(command)

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True


class RecordingGateway:
    """Payment gateway double returning a fixed Snap token."""

    def __init__(self, token: str = "snap-token-123", error: str | None = None) -> None:
        self.token = token
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def create_transaction(self, parameters: dict[str, Any]) -> str:
        self.calls.append(parameters)
        if self.error is not None:
            raise PaymentGatewayError(self.error)
        return self.token


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.001)


@pytest.fixture
def fake_connection_factory() -> Callable[..., FakeBrokerConnection]:
    return FakeBrokerConnection


@pytest.fixture
def recording_dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def recording_gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def failing_gateway() -> RecordingGateway:
    return RecordingGateway(error="503 Service Unavailable")


@pytest.fixture
def waiter() -> Callable[..., Any]:
    return wait_until


class FailingRepository:
    """Transaction repository whose every call raises the configured error."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.closed = False

    async def create(self, record: TransactionRecord) -> None:
        raise self.error

    async def update_status(self, order_id: str, status: str) -> None:
        raise self.error

    async def list_transactions(self) -> list[TransactionRecord]:
        raise self.error

    async def close(self) -> None:
        self.closed = True


def signed_notification(
    order_id: str,
    transaction_status: str,
    *,
    status_code: str = "200",
    gross_amount: str = "100.00",
    server_key: str = SERVER_KEY,
    **extra: Any,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "order_id": order_id,
        "status_code": status_code,
        "gross_amount": gross_amount,
        "transaction_status": transaction_status,
        "signature_key": compute_signature(
            order_id,
            status_code,
            normalize_gross_amount(gross_amount) or gross_amount,
            server_key,
        ),
    }
    payload.update(extra)
    return payload


@pytest.fixture
def service_factory(
    recording_dispatcher: RecordingDispatcher,
    recording_gateway: RecordingGateway,
) -> Callable[..., PaymentBridgeService]:
    def build(**overrides: Any) -> PaymentBridgeService:
        options: dict[str, Any] = {
            "catalog": ItemCatalog(),
            "order_items": OrderItemMap(),
            "repository": InMemoryTransactionRepository(),
            "payment_gateway": recording_gateway,
            "command_dispatcher": recording_dispatcher,
            "broker_connection": FakeBrokerConnection(),
            "server_key": SERVER_KEY,
            "admin_token": ADMIN_TOKEN,
            "clock": lambda: 1_700_000_000.0,
        }
        options.update(overrides)
        return PaymentBridgeService(**options)

    return build
