"""Domain entities."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime

from scandrink_bridge.domain.relay_types import RelayStatus


@dataclass(slots=True, frozen=True)
class Command:
    """Immutable relay command delivered over the message channel."""

    order_id: str
    status: RelayStatus
    relay: int

    def to_json(self) -> str:
        """Serialize to the compact wire payload."""

        return json.dumps(
            {"order_id": self.order_id, "status": self.status.value, "relay": self.relay},
            separators=(",", ":"),
        )


@dataclass(slots=True)
class TransactionRecord:
    """Persisted transaction row."""

    order_id: str
    item_name: str
    price: int
    status: str
    created_at: datetime | None = None


__all__ = ["Command", "TransactionRecord"]
