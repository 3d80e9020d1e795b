"""MQTT broker connection with automatic reconnect."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import paho.mqtt.client as mqtt

from scandrink_bridge.domain.ports import BrokerConnection, ConnectionStateListener
from scandrink_bridge.domain.relay_types import BrokerConnectionState

logger = logging.getLogger(__name__)
_paho_logger = logging.getLogger("paho")

_DEFAULT_PORTS = {
    "mqtt": 1883,
    "tcp": 1883,
    "mqtts": 8883,
    "ssl": 8883,
    "ws": 80,
    "wss": 443,
}
_TLS_SCHEMES = frozenset({"mqtts", "ssl", "wss"})
_WEBSOCKET_SCHEMES = frozenset({"ws", "wss"})

ClientFactory = Callable[[str, str], Any]


@dataclass(slots=True, frozen=True)
class BrokerEndpoint:
    """Connection target parsed from a broker URL."""

    host: str
    port: int
    use_tls: bool
    transport: str
    path: str


def parse_broker_url(broker_url: str) -> BrokerEndpoint:
    """Parse `mqtt://`, `mqtts://`, `ws://` or `wss://` broker URLs."""

    parsed = urlparse(broker_url.strip())
    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ValueError(f"Unsupported MQTT broker URL scheme '{parsed.scheme}'.")
    if not parsed.hostname:
        raise ValueError(f"MQTT broker URL '{broker_url}' has no host.")

    try:
        port = parsed.port or _DEFAULT_PORTS[scheme]
    except ValueError as exc:
        raise ValueError(f"MQTT broker URL '{broker_url}' has an invalid port.") from exc

    transport = "websockets" if scheme in _WEBSOCKET_SCHEMES else "tcp"
    path = ""
    if transport == "websockets":
        path = parsed.path or "/mqtt"
    return BrokerEndpoint(
        host=parsed.hostname,
        port=port,
        use_tls=scheme in _TLS_SCHEMES,
        transport=transport,
        path=path,
    )


def _default_client_factory(client_id: str, transport: str) -> Any:
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        transport=transport,
    )


def _is_failure(reason_code: Any) -> bool:
    if isinstance(reason_code, int):
        return reason_code != 0
    return bool(getattr(reason_code, "is_failure", False))


class MqttBrokerConnection(BrokerConnection):
    """Own one long-lived paho-mqtt client and expose its state to the event loop.

    paho runs its network loop in a background thread and keeps reconnecting
    with a fixed delay. Every callback is marshalled onto the asyncio loop, so
    state changes, listeners and publish acknowledgements are only touched on
    the loop thread.
    """

    def __init__(
        self,
        broker_url: str,
        *,
        client_id: str = "scandrink-bridge",
        username: str | None = None,
        password: str | None = None,
        reconnect_delay_seconds: float = 5.0,
        publish_timeout_seconds: float = 10.0,
        keepalive_seconds: int = 60,
        status_topic: str | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._endpoint = parse_broker_url(broker_url)
        self._client_id = client_id
        self._username = username
        self._password = password
        self._reconnect_delay_seconds = max(reconnect_delay_seconds, 0.1)
        self._publish_timeout_seconds = max(publish_timeout_seconds, 0.01)
        self._keepalive_seconds = max(keepalive_seconds, 1)
        self._status_topic = status_topic
        self._client_factory = client_factory or _default_client_factory

        self._client: Any | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._state = BrokerConnectionState.DISCONNECTED
        self._listeners: list[ConnectionStateListener] = []
        self._pending_acks: dict[int, asyncio.Future[bool]] = {}

    @property
    def state(self) -> BrokerConnectionState:
        return self._state

    @property
    def endpoint(self) -> BrokerEndpoint:
        return self._endpoint

    def is_connected(self) -> bool:
        return self._state is BrokerConnectionState.CONNECTED

    def add_state_listener(self, listener: ConnectionStateListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    async def start(self) -> None:
        """Start the background network loop without waiting for CONNACK."""

        self._loop = asyncio.get_running_loop()
        if self._client is not None:
            return

        client = self._client_factory(self._client_id, self._endpoint.transport)
        client.enable_logger(_paho_logger)
        if self._username is not None:
            client.username_pw_set(username=self._username, password=self._password)
        if self._endpoint.use_tls:
            client.tls_set()
        if self._endpoint.transport == "websockets":
            client.ws_set_options(path=self._endpoint.path)
        client.reconnect_delay_set(
            min_delay=self._reconnect_delay_seconds,
            max_delay=self._reconnect_delay_seconds,
        )

        client.on_pre_connect = self._on_pre_connect
        client.on_connect = self._on_connect
        client.on_connect_fail = self._on_connect_fail
        client.on_disconnect = self._on_disconnect
        client.on_publish = self._on_publish
        client.on_message = self._on_message

        self._client = client
        self._set_state(BrokerConnectionState.CONNECTING)
        logger.info(
            "Connecting to MQTT broker %s:%s (tls=%s, transport=%s).",
            self._endpoint.host,
            self._endpoint.port,
            self._endpoint.use_tls,
            self._endpoint.transport,
        )
        client.connect_async(
            self._endpoint.host,
            self._endpoint.port,
            keepalive=self._keepalive_seconds,
        )
        client.loop_start()

    async def stop(self) -> None:
        """Disconnect and stop the background network loop."""

        client = self._client
        if client is None:
            return
        self._client = None

        client.disconnect()
        client.loop_stop()
        self._fail_pending_acks()
        self._set_state(BrokerConnectionState.DISCONNECTED)

    async def publish(self, topic: str, payload: str, qos: int) -> bool:
        """Publish and wait for the broker acknowledgement when qos > 0."""

        client = self._client
        if client is None or not self.is_connected():
            return False

        try:
            info = client.publish(topic, payload, qos=qos)
        except Exception as exc:  # noqa: BLE001
            logger.warning("MQTT publish to '%s' raised: %s", topic, exc)
            return False
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning("MQTT publish to '%s' rejected with rc=%s.", topic, info.rc)
            return False
        if qos == 0:
            return True

        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._pending_acks[info.mid] = future
        try:
            return await asyncio.wait_for(future, timeout=self._publish_timeout_seconds)
        except TimeoutError:
            logger.warning(
                "No broker acknowledgement for message %s on '%s' within %.1fs.",
                info.mid,
                topic,
                self._publish_timeout_seconds,
            )
            return False
        finally:
            self._pending_acks.pop(info.mid, None)

    def _set_state(self, state: BrokerConnectionState) -> None:
        if state is self._state:
            return
        previous = self._state
        self._state = state
        logger.info("MQTT connection state %s -> %s.", previous.value, state.value)
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("MQTT connection state listener failed.")

    def _resolve_ack(self, mid: int, delivered: bool) -> None:
        future = self._pending_acks.get(mid)
        if future is not None and not future.done():
            future.set_result(delivered)

    def _fail_pending_acks(self) -> None:
        for future in self._pending_acks.values():
            if not future.done():
                future.set_result(False)

    def _on_connection_lost(self) -> None:
        self._fail_pending_acks()
        self._set_state(BrokerConnectionState.DISCONNECTED)

    def _call_on_loop(self, callback: Callable[..., None], *args: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(callback, *args)

    # paho callbacks, invoked on the paho network thread.

    def _on_pre_connect(self, _client: Any, _userdata: Any) -> None:
        self._call_on_loop(self._set_state, BrokerConnectionState.CONNECTING)

    def _on_connect(
        self,
        client: Any,
        _userdata: Any,
        _flags: Any,
        reason_code: Any,
        _properties: Any = None,
    ) -> None:
        if _is_failure(reason_code):
            logger.error("MQTT broker refused connection: %s", reason_code)
            self._call_on_loop(self._set_state, BrokerConnectionState.DISCONNECTED)
            return

        logger.info("Connected to MQTT broker.")
        if self._status_topic:
            client.subscribe(self._status_topic, qos=1)
        self._call_on_loop(self._set_state, BrokerConnectionState.CONNECTED)

    def _on_connect_fail(self, _client: Any, _userdata: Any) -> None:
        logger.error(
            "MQTT connection to %s:%s failed, retrying in %.1fs.",
            self._endpoint.host,
            self._endpoint.port,
            self._reconnect_delay_seconds,
        )
        self._call_on_loop(self._set_state, BrokerConnectionState.DISCONNECTED)

    def _on_disconnect(
        self,
        _client: Any,
        _userdata: Any,
        _disconnect_flags: Any,
        reason_code: Any,
        _properties: Any = None,
    ) -> None:
        logger.warning("MQTT disconnected (%s), reconnecting.", reason_code)
        self._call_on_loop(self._on_connection_lost)

    def _on_publish(
        self,
        _client: Any,
        _userdata: Any,
        mid: int,
        reason_code: Any,
        _properties: Any = None,
    ) -> None:
        self._call_on_loop(self._resolve_ack, mid, not _is_failure(reason_code))

    def _on_message(self, _client: Any, _userdata: Any, message: Any) -> None:
        try:
            payload = message.payload.decode("utf-8")
        except UnicodeDecodeError:
            payload = repr(message.payload)
        logger.info("Relay status on '%s': %s", message.topic, payload)


__all__ = ["BrokerEndpoint", "MqttBrokerConnection", "parse_broker_url"]
