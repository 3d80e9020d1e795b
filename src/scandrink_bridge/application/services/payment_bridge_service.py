"""Payment notification and transaction use-case service."""

from __future__ import annotations

import hmac
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from scandrink_bridge.domain.catalog import ItemCatalog
from scandrink_bridge.domain.entities import Command, TransactionRecord
from scandrink_bridge.domain.errors import (
    NotificationSignatureError,
    PaymentGatewayError,
    TransactionStoreUnavailableError,
    TransactionValidationError,
    UnauthorizedError,
)
from scandrink_bridge.domain.order_items import UNKNOWN_ITEM, OrderItemMap
from scandrink_bridge.domain.payment_models import (
    CreateTransactionRequest,
    CreateTransactionResponse,
    HealthResponse,
    MidtransNotification,
)
from scandrink_bridge.domain.ports import (
    BrokerConnection,
    CommandSink,
    PaymentGateway,
    TransactionRepository,
)
from scandrink_bridge.domain.relay_types import (
    ACCEPTED_FRAUD_STATUS,
    FAILED_STATUSES,
    SETTLED_STATUSES,
    TERMINAL_STATUSES,
    RelayStatus,
    TransactionStatus,
)
from scandrink_bridge.domain.signature import verify_signature

_DEFAULT_MAX_QUANTITY = 10

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NotificationResult:
    """Outcome of one handled gateway notification."""

    order_id: str | None
    item_name: str
    transaction_status: str | None
    stored_status: str | None = None
    commands: list[Command] = field(default_factory=list)
    signature_bypassed: bool = False


class PaymentBridgeService:
    """Turn payment events into transaction records and relay commands."""

    def __init__(
        self,
        *,
        catalog: ItemCatalog,
        order_items: OrderItemMap,
        repository: TransactionRepository,
        payment_gateway: PaymentGateway,
        command_dispatcher: CommandSink,
        broker_connection: BrokerConnection,
        server_key: str | None,
        admin_token: str | None,
        allow_unsigned_unknown_orders: bool = False,
        max_quantity: int = _DEFAULT_MAX_QUANTITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._catalog = catalog
        self._order_items = order_items
        self._repository = repository
        self._payment_gateway = payment_gateway
        self._command_dispatcher = command_dispatcher
        self._broker_connection = broker_connection
        self._server_key = server_key
        self._admin_token = admin_token
        self._allow_unsigned_unknown_orders = allow_unsigned_unknown_orders
        self._max_quantity = max(max_quantity, 1)
        self._clock = clock

    async def start(self) -> None:
        """Start the broker connection and command dispatcher."""

        if self._allow_unsigned_unknown_orders:
            logger.warning(
                "Notifications for unknown orders are accepted WITHOUT signature "
                "verification; disable SCANDRINK_ALLOW_UNSIGNED_UNKNOWN_ORDERS in production."
            )
        await self._broker_connection.start()
        await self._command_dispatcher.start()

    async def stop(self) -> None:
        """Stop dispatching and release external connections."""

        await self._command_dispatcher.stop()
        await self._broker_connection.stop()
        await self._repository.close()

    def health(self) -> HealthResponse:
        return HealthResponse(
            broker=self._broker_connection.state.value,
            pending_commands=self._command_dispatcher.pending_count,
        )

    async def create_transaction(
        self,
        request: CreateTransactionRequest,
    ) -> CreateTransactionResponse:
        """Create a Snap transaction for one catalog item."""

        if not request.item_name or not request.quantity or not request.customer_details:
            raise TransactionValidationError(
                "item_name, quantity and customer_details are required."
            )
        if not isinstance(request.customer_details, dict):
            raise TransactionValidationError("customer_details must be an object.")

        item_name = request.item_name
        item = self._catalog.get(item_name) if isinstance(item_name, str) else None
        if item is None:
            raise TransactionValidationError(f"Unknown menu item '{item_name}'.")

        quantity = self._parse_quantity(request.quantity)
        if quantity is None:
            raise TransactionValidationError(
                f"quantity must be an integer between 1 and {self._max_quantity}."
            )

        order_id = f"ORDER-{int(self._clock() * 1000)}"
        self._order_items.remember(order_id, item_name)
        parameters: dict[str, Any] = {
            "transaction_details": {
                "order_id": order_id,
                "gross_amount": item.price * quantity,
            },
            "item_details": [
                {
                    "id": item_name,
                    "price": item.price,
                    "quantity": quantity,
                    "name": item_name,
                }
            ],
            "customer_details": request.customer_details,
        }

        try:
            token = await self._payment_gateway.create_transaction(parameters)
        except PaymentGatewayError as exc:
            self._order_items.forget(order_id)
            logger.error("Failed to create transaction %s: %s", order_id, exc)
            raise

        await self._best_effort(
            f"record pending transaction {order_id}",
            self._repository.create(
                TransactionRecord(
                    order_id=order_id,
                    item_name=item_name,
                    price=item.price,
                    status=TransactionStatus.PENDING.value,
                )
            ),
        )
        logger.info("Transaction created: %s -> %s x%s", order_id, item_name, quantity)
        return CreateTransactionResponse(token=token, order_id=order_id)

    async def handle_notification(self, notification: MidtransNotification) -> NotificationResult:
        """Verify a notification, queue relay commands and record the new status."""

        order_id = notification.order_id
        transaction_status = notification.transaction_status
        if order_id not in self._order_items and self._allow_unsigned_unknown_orders:
            logger.warning(
                "Acknowledging notification for unknown order %s without signature check.",
                order_id,
            )
            return NotificationResult(
                order_id=order_id,
                item_name=UNKNOWN_ITEM,
                transaction_status=transaction_status,
                signature_bypassed=True,
            )

        item_name = self._order_items.resolve(order_id) if order_id else UNKNOWN_ITEM
        logger.info("Midtrans notification: %s | status: %s", order_id, transaction_status)

        if not verify_signature(notification.signed_fields(), self._server_key):
            logger.error("Invalid signature for order %s.", order_id)
            raise NotificationSignatureError(f"Invalid signature for order '{order_id}'.")

        assert order_id is not None
        result = NotificationResult(
            order_id=order_id,
            item_name=item_name,
            transaction_status=transaction_status,
            stored_status=transaction_status,
        )
        fraud_status = notification.fraud_status

        if transaction_status in SETTLED_STATUSES and (
            not fraud_status or fraud_status == ACCEPTED_FRAUD_STATUS
        ):
            result.stored_status = TransactionStatus.SUCCESS.value
            relay = self._catalog.relay_for(item_name)
            if relay is not None:
                result.commands.append(Command(order_id, RelayStatus.ON, relay))
            else:
                logger.warning("No relay wired for item '%s' of order %s.", item_name, order_id)
        elif transaction_status in FAILED_STATUSES:
            result.stored_status = TransactionStatus.FAILED.value
            result.commands.extend(
                Command(order_id, RelayStatus.OFF, relay) for relay in self._catalog.relays()
            )

        for command in result.commands:
            self._command_dispatcher.enqueue(command)

        if transaction_status in TERMINAL_STATUSES:
            self._order_items.forget(order_id)

        if result.stored_status:
            await self._best_effort(
                f"update transaction {order_id} to {result.stored_status}",
                self._repository.update_status(order_id, result.stored_status),
            )
        return result

    async def list_transactions(self, admin_token: str | None) -> list[TransactionRecord]:
        """Return stored transactions for a caller holding the admin token."""

        if not self._is_admin(admin_token):
            raise UnauthorizedError("Invalid admin token.")

        try:
            return await self._repository.list_transactions()
        except TransactionStoreUnavailableError as exc:
            logger.warning("Transaction store unavailable, returning no records: %s", exc)
            return []

    def _is_admin(self, admin_token: str | None) -> bool:
        if not self._admin_token or not admin_token:
            return False
        return hmac.compare_digest(admin_token.encode("utf-8"), self._admin_token.encode("utf-8"))

    def _parse_quantity(self, value: object) -> int | None:
        quantity: int | None = None
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            quantity = value
        elif isinstance(value, float) and value.is_integer():
            quantity = int(value)
        elif isinstance(value, str):
            try:
                quantity = int(value.strip())
            except ValueError:
                return None

        if quantity is None or quantity < 1 or quantity > self._max_quantity:
            return None
        return quantity

    async def _best_effort(self, description: str, operation: Awaitable[None]) -> None:
        try:
            await operation
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to %s: %s", description, exc)


__all__ = ["NotificationResult", "PaymentBridgeService"]
