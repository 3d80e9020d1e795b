"""Application settings."""

import json
from enum import StrEnum
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from scandrink_bridge.domain.relay_types import RequeuePolicy


class RepositoryBackend(StrEnum):
    """Available persistence adapters for transaction records."""

    IN_MEMORY = "in_memory"
    POSTGRES = "postgres"


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "ScanDrink Payment Bridge"
    api_prefix: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["https://scandrink.vercel.app"]
    )
    admin_token: str | None = None
    midtrans_server_key: str | None = None
    midtrans_is_production: bool = False
    midtrans_base_url: str | None = None
    midtrans_timeout_seconds: float = 10.0
    allow_unsigned_unknown_orders: bool = False
    max_quantity: int = 10
    order_item_ttl_seconds: float | None = None
    mqtt_enabled: bool | None = None
    mqtt_broker_url: str | None = None
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_client_id: str = "scandrink-bridge"
    mqtt_control_topic: str = "/scandrink/relay/control"
    mqtt_status_topic: str | None = "/scandrink/relay/status"
    mqtt_qos: int = 1
    mqtt_reconnect_seconds: float = 5.0
    mqtt_publish_timeout_seconds: float = 10.0
    dispatch_retry_seconds: float = 1.0
    dispatch_requeue_policy: RequeuePolicy = RequeuePolicy.TAIL
    dispatch_queue_warning_threshold: int | None = None
    repository_backend: RepositoryBackend = RepositoryBackend.IN_MEMORY
    postgres_dsn: str | None = None
    postgres_pool_min_size: int = 1
    postgres_pool_max_size: int = 10

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_csv_list(cls, value: object) -> object:
        """Support comma-separated env var values in addition to JSON arrays."""

        if not isinstance(value, str):
            return value
        if value.strip().startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]

    @property
    def mqtt_delivery_enabled(self) -> bool:
        """MQTT is on whenever a broker URL is set, unless explicitly disabled."""

        if self.mqtt_enabled is None:
            return bool(self.mqtt_broker_url)
        return self.mqtt_enabled

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Ensure backend-specific settings are valid."""

        if self.repository_backend == RepositoryBackend.POSTGRES and not self.postgres_dsn:
            raise ValueError(
                "SCANDRINK_POSTGRES_DSN is required when SCANDRINK_REPOSITORY_BACKEND=postgres."
            )
        if self.postgres_pool_min_size < 1:
            raise ValueError("SCANDRINK_POSTGRES_POOL_MIN_SIZE must be >= 1.")
        if self.postgres_pool_max_size < self.postgres_pool_min_size:
            raise ValueError(
                "SCANDRINK_POSTGRES_POOL_MAX_SIZE must be >= SCANDRINK_POSTGRES_POOL_MIN_SIZE."
            )
        if self.mqtt_enabled is True and not self.mqtt_broker_url:
            raise ValueError(
                "SCANDRINK_MQTT_BROKER_URL is required when SCANDRINK_MQTT_ENABLED=true."
            )
        if self.mqtt_qos not in {0, 1, 2}:
            raise ValueError("SCANDRINK_MQTT_QOS must be one of 0, 1, 2.")
        if self.mqtt_reconnect_seconds <= 0:
            raise ValueError("SCANDRINK_MQTT_RECONNECT_SECONDS must be > 0.")
        if self.mqtt_publish_timeout_seconds <= 0:
            raise ValueError("SCANDRINK_MQTT_PUBLISH_TIMEOUT_SECONDS must be > 0.")
        if self.dispatch_retry_seconds <= 0:
            raise ValueError("SCANDRINK_DISPATCH_RETRY_SECONDS must be > 0.")
        if (
            self.dispatch_queue_warning_threshold is not None
            and self.dispatch_queue_warning_threshold < 1
        ):
            raise ValueError("SCANDRINK_DISPATCH_QUEUE_WARNING_THRESHOLD must be >= 1.")
        if self.midtrans_timeout_seconds <= 0:
            raise ValueError("SCANDRINK_MIDTRANS_TIMEOUT_SECONDS must be > 0.")
        if self.max_quantity < 1:
            raise ValueError("SCANDRINK_MAX_QUANTITY must be >= 1.")
        if self.order_item_ttl_seconds is not None and self.order_item_ttl_seconds <= 0:
            raise ValueError("SCANDRINK_ORDER_ITEM_TTL_SECONDS must be > 0.")
        return self

    model_config = SettingsConfigDict(env_prefix="SCANDRINK_", extra="ignore")


__all__ = ["RepositoryBackend", "Settings"]
