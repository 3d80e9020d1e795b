"""Domain public API."""

from scandrink_bridge.domain.catalog import DEFAULT_CATALOG, CatalogItem, ItemCatalog
from scandrink_bridge.domain.entities import Command, TransactionRecord
from scandrink_bridge.domain.errors import (
    NotificationSignatureError,
    PaymentBridgeError,
    PaymentGatewayError,
    TransactionPersistenceError,
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
    TransactionRecordResponse,
)
from scandrink_bridge.domain.ports import (
    BrokerConnection,
    CommandSink,
    ConnectionStateListener,
    PaymentGateway,
    TransactionRepository,
)
from scandrink_bridge.domain.relay_types import (
    BrokerConnectionState,
    RelayStatus,
    RequeuePolicy,
    TransactionStatus,
)
from scandrink_bridge.domain.signature import verify_signature

__all__ = [
    "BrokerConnection",
    "BrokerConnectionState",
    "CatalogItem",
    "Command",
    "CommandSink",
    "ConnectionStateListener",
    "CreateTransactionRequest",
    "CreateTransactionResponse",
    "DEFAULT_CATALOG",
    "HealthResponse",
    "ItemCatalog",
    "MidtransNotification",
    "NotificationSignatureError",
    "OrderItemMap",
    "PaymentBridgeError",
    "PaymentGateway",
    "PaymentGatewayError",
    "RelayStatus",
    "RequeuePolicy",
    "TransactionPersistenceError",
    "TransactionRecord",
    "TransactionRecordResponse",
    "TransactionRepository",
    "TransactionStatus",
    "TransactionStoreUnavailableError",
    "TransactionValidationError",
    "UNKNOWN_ITEM",
    "UnauthorizedError",
    "verify_signature",
]
