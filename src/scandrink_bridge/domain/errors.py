"""Domain exceptions for payment bridge operations."""


class PaymentBridgeError(Exception):
    """Base class for payment bridge errors."""


class TransactionValidationError(PaymentBridgeError):
    """Raised when a transaction request is incomplete or invalid."""


class NotificationSignatureError(PaymentBridgeError):
    """Raised when a gateway notification fails signature verification."""


class UnauthorizedError(PaymentBridgeError):
    """Raised when an admin request carries a wrong or missing token."""


class PaymentGatewayError(PaymentBridgeError):
    """Raised when the payment gateway cannot create a transaction."""


class TransactionPersistenceError(PaymentBridgeError):
    """Raised when the transaction store fails a query."""


class TransactionStoreUnavailableError(TransactionPersistenceError):
    """Raised when the transaction store cannot be reached at all."""


__all__ = [
    "NotificationSignatureError",
    "PaymentBridgeError",
    "PaymentGatewayError",
    "TransactionPersistenceError",
    "TransactionStoreUnavailableError",
    "TransactionValidationError",
    "UnauthorizedError",
]
