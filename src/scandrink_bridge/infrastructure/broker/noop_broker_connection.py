"""Broker connection used when MQTT delivery is disabled."""

from __future__ import annotations

import logging
from collections import deque

from scandrink_bridge.domain.ports import BrokerConnection, ConnectionStateListener
from scandrink_bridge.domain.relay_types import BrokerConnectionState

logger = logging.getLogger(__name__)

_MAX_RECORDED_PUBLISHES = 256


class NoopBrokerConnection(BrokerConnection):
    """Always-connected stand-in that logs publishes instead of sending them."""

    def __init__(self) -> None:
        self.published: deque[tuple[str, str, int]] = deque(maxlen=_MAX_RECORDED_PUBLISHES)

    @property
    def state(self) -> BrokerConnectionState:
        return BrokerConnectionState.CONNECTED

    def is_connected(self) -> bool:
        return True

    async def start(self) -> None:
        logger.warning("MQTT delivery disabled; relay commands are only logged.")

    async def stop(self) -> None:
        return None

    async def publish(self, topic: str, payload: str, qos: int) -> bool:
        self.published.append((topic, payload, qos))
        logger.info("MQTT disabled, would publish to '%s': %s", topic, payload)
        return True

    def add_state_listener(self, listener: ConnectionStateListener) -> None:
        _ = listener


__all__ = ["NoopBrokerConnection"]
