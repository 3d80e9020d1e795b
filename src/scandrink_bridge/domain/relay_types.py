"""Relay, broker and transaction state enums."""

from enum import StrEnum


class RelayStatus(StrEnum):
    """Switch position requested for a relay."""

    ON = "on"
    OFF = "off"


class BrokerConnectionState(StrEnum):
    """Lifecycle state of the broker connection."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class TransactionStatus(StrEnum):
    """Stored transaction states decided by the bridge."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class RequeuePolicy(StrEnum):
    """Where a command goes after a failed publish attempt."""

    TAIL = "tail"
    HEAD = "head"


SETTLED_STATUSES = frozenset({"capture", "settlement"})
FAILED_STATUSES = frozenset({"deny", "cancel", "expire"})
TERMINAL_STATUSES = frozenset({"settlement", "expire", "cancel"})
ACCEPTED_FRAUD_STATUS = "accept"


__all__ = [
    "ACCEPTED_FRAUD_STATUS",
    "BrokerConnectionState",
    "FAILED_STATUSES",
    "RelayStatus",
    "RequeuePolicy",
    "SETTLED_STATUSES",
    "TERMINAL_STATUSES",
    "TransactionStatus",
]
