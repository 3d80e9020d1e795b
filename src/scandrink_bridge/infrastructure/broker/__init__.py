"""Broker connection implementations."""

from scandrink_bridge.infrastructure.broker.mqtt_broker_connection import (
    BrokerEndpoint,
    MqttBrokerConnection,
    parse_broker_url,
)
from scandrink_bridge.infrastructure.broker.noop_broker_connection import NoopBrokerConnection

__all__ = [
    "BrokerEndpoint",
    "MqttBrokerConnection",
    "NoopBrokerConnection",
    "parse_broker_url",
]
