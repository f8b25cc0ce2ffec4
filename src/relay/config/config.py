"""
Configuration management for the relay services.

Loads settings from environment variables (and a local .env file). Variable
names follow the deployment's existing environment where one exists
(MESSAGE_QUEUE_HOST, RABBITMQ_USER, NOSQL_DB_HOST, REDIS_HOST, ADSB_SERVER, ...).
"""

from functools import lru_cache
from typing import Literal
from urllib.parse import quote

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.exceptions import ConfigurationError

# Load .env file before settings are initialized
load_dotenv()


AppendMode = Literal["push", "add_to_set"]


class QueueSettings(BaseSettings):
    """RabbitMQ broker configuration."""

    host: str = Field(default="localhost", validation_alias="MESSAGE_QUEUE_HOST")
    port: int = Field(default=5672)
    username: str = Field(default="user", validation_alias="RABBITMQ_USER")
    password: str = Field(default="password", validation_alias="RABBITMQ_PASS")
    queue_name: str = Field(default="adsb_data", validation_alias="QUEUE_NAME")
    durable: bool = Field(default=True)
    prefetch_count: int = Field(default=1)
    heartbeat: int = Field(default=60)

    model_config = SettingsConfigDict(env_prefix="QUEUE_", populate_by_name=True)

    @property
    def url(self) -> str:
        """AMQP URL for the broker."""
        return (
            f"amqp://{quote(self.username, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/%2F?heartbeat={self.heartbeat}"
        )


class StoreSettings(BaseSettings):
    """MongoDB document store configuration."""

    host: str = Field(default="localhost", validation_alias="NOSQL_DB_HOST")
    database: str = Field(default="adsb", validation_alias="NOSQL_DB_NAME")
    # Full URI wins over host when set
    uri: str | None = Field(default=None)
    collection: str = Field(default="messages")
    # Aggregate document selected by {"partition": partition}
    partition: str = Field(default="default")
    append_mode: AppendMode = Field(default="push")
    timeout_ms: int = Field(default=5000)

    model_config = SettingsConfigDict(env_prefix="STORE_", populate_by_name=True)

    @property
    def connection_uri(self) -> str:
        return self.uri or f"mongodb://{self.host}:27017"

    @property
    def selector(self) -> dict[str, str]:
        return {"partition": self.partition}


class CacheSettings(BaseSettings):
    """Redis last-seen cache configuration."""

    host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    url: str | None = Field(default=None)
    key: str = Field(default="lastMessage")
    timeout_seconds: float = Field(default=5.0)

    model_config = SettingsConfigDict(env_prefix="CACHE_", populate_by_name=True)

    @property
    def connection_url(self) -> str:
        return self.url or f"redis://{self.host}"


class CaptureSettings(BaseSettings):
    """SBS feed capture configuration."""

    server: str = Field(default="127.0.0.1:30003", validation_alias="ADSB_SERVER")
    timeout_seconds: float = Field(default=5.0)
    # Lines buffered between the capture thread and the publisher
    channel_size: int = Field(default=10000)
    # Replay a recorded feed instead of connecting to ADSB_SERVER
    replay_file: str | None = Field(default=None)

    model_config = SettingsConfigDict(env_prefix="CAPTURE_", populate_by_name=True)

    @property
    def address(self) -> tuple[str, int]:
        """
        (host, port) parsed from ADSB_SERVER.

        Raises:
            ConfigurationError: If the port is not a number
        """
        host, _, port = self.server.rpartition(":")
        if not host:
            return self.server, 30003
        if not port.isdigit():
            raise ConfigurationError(f"Invalid ADSB_SERVER address: {self.server!r}")
        return host, int(port)


class ProducerSettings(BaseSettings):
    """Producer (capture → queue) configuration."""

    publish_interval_ms: int = Field(default=1000, validation_alias="PUBLISH_INTERVAL")
    publish_batch_limit: int = Field(default=500)

    model_config = SettingsConfigDict(env_prefix="PRODUCER_", populate_by_name=True)


class ConsumerSettings(BaseSettings):
    """Consumer (queue → sinks) configuration."""

    retry_backoff_seconds: float = Field(default=1.0)
    retry_backoff_max_seconds: float = Field(default=60.0)
    max_consecutive_failures: int = Field(default=10)
    reconnect_attempts: int = Field(default=5)
    inactivity_timeout_seconds: float = Field(default=5.0)

    model_config = SettingsConfigDict(env_prefix="CONSUMER_")


class AuditLogSettings(BaseSettings):
    """Per-day raw line log configuration."""

    dir: str = Field(default="logs/messages")

    model_config = SettingsConfigDict(env_prefix="AUDIT_LOG_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")
    log_file: str = Field(default="relay.log")
    rotation: str = Field(default="10 MB")
    retention: str = Field(default="7 days")

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""

    queue: QueueSettings = Field(default_factory=QueueSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    producer: ProducerSettings = Field(default_factory=ProducerSettings)
    consumer: ConsumerSettings = Field(default_factory=ConsumerSettings)
    audit_log: AuditLogSettings = Field(default_factory=AuditLogSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Environment name (development, staging, production)
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The application settings
    """
    return Settings()


__all__ = [
    "AppendMode",
    "Settings",
    "QueueSettings",
    "StoreSettings",
    "CacheSettings",
    "CaptureSettings",
    "ProducerSettings",
    "ConsumerSettings",
    "AuditLogSettings",
    "LoggingSettings",
    "get_settings",
]
