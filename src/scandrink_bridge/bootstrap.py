"""Application bootstrap/wiring."""

import logging

from scandrink_bridge.application.services import PaymentBridgeService
from scandrink_bridge.config import RepositoryBackend, Settings
from scandrink_bridge.domain.catalog import ItemCatalog
from scandrink_bridge.domain.order_items import OrderItemMap
from scandrink_bridge.domain.ports import BrokerConnection, TransactionRepository
from scandrink_bridge.infrastructure.broker import MqttBrokerConnection, NoopBrokerConnection
from scandrink_bridge.infrastructure.dispatch import CommandDispatcher
from scandrink_bridge.infrastructure.payments import MidtransSnapClient
from scandrink_bridge.infrastructure.repositories import (
    InMemoryTransactionRepository,
    PostgresTransactionRepository,
)

logger = logging.getLogger(__name__)


def _build_repository(settings: Settings) -> TransactionRepository:
    if settings.repository_backend == RepositoryBackend.POSTGRES:
        if settings.postgres_dsn is None:
            raise ValueError(
                "SCANDRINK_POSTGRES_DSN is required when SCANDRINK_REPOSITORY_BACKEND=postgres."
            )
        return PostgresTransactionRepository(
            dsn=settings.postgres_dsn,
            min_pool_size=settings.postgres_pool_min_size,
            max_pool_size=settings.postgres_pool_max_size,
        )
    return InMemoryTransactionRepository()


def _build_broker_connection(settings: Settings) -> BrokerConnection:
    if not settings.mqtt_delivery_enabled:
        if settings.mqtt_broker_url:
            logger.warning(
                "SCANDRINK_MQTT_ENABLED=false; relay commands will not reach %s.",
                settings.mqtt_broker_url,
            )
        return NoopBrokerConnection()
    if settings.mqtt_broker_url is None:
        raise ValueError(
            "SCANDRINK_MQTT_BROKER_URL is required when SCANDRINK_MQTT_ENABLED=true."
        )
    return MqttBrokerConnection(
        settings.mqtt_broker_url,
        client_id=settings.mqtt_client_id,
        username=settings.mqtt_username,
        password=settings.mqtt_password,
        reconnect_delay_seconds=settings.mqtt_reconnect_seconds,
        publish_timeout_seconds=settings.mqtt_publish_timeout_seconds,
        status_topic=settings.mqtt_status_topic or None,
    )


def _build_payment_gateway(settings: Settings) -> MidtransSnapClient:
    if not settings.midtrans_server_key:
        logger.warning(
            "SCANDRINK_MIDTRANS_SERVER_KEY is not set; transaction creation and "
            "notification signature checks will fail."
        )
    return MidtransSnapClient(
        settings.midtrans_server_key,
        is_production=settings.midtrans_is_production,
        base_url=settings.midtrans_base_url,
        timeout_seconds=settings.midtrans_timeout_seconds,
    )


def build_payment_bridge_service(settings: Settings) -> PaymentBridgeService:
    """Compose service graph."""

    broker_connection = _build_broker_connection(settings)
    command_dispatcher = CommandDispatcher(
        broker_connection,
        topic=settings.mqtt_control_topic,
        qos=settings.mqtt_qos,
        retry_delay_seconds=settings.dispatch_retry_seconds,
        requeue_policy=settings.dispatch_requeue_policy,
        queue_warning_threshold=settings.dispatch_queue_warning_threshold,
    )
    if not settings.admin_token:
        logger.warning("SCANDRINK_ADMIN_TOKEN is not set; transaction listing is disabled.")

    return PaymentBridgeService(
        catalog=ItemCatalog(),
        order_items=OrderItemMap(ttl_seconds=settings.order_item_ttl_seconds),
        repository=_build_repository(settings),
        payment_gateway=_build_payment_gateway(settings),
        command_dispatcher=command_dispatcher,
        broker_connection=broker_connection,
        server_key=settings.midtrans_server_key,
        admin_token=settings.admin_token,
        allow_unsigned_unknown_orders=settings.allow_unsigned_unknown_orders,
        max_quantity=settings.max_quantity,
    )


__all__ = ["build_payment_bridge_service"]
