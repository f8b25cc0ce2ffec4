"""Configuration module for the relay services."""

from src.relay.config.config import (
    AppendMode,
    Settings,
    QueueSettings,
    StoreSettings,
    CacheSettings,
    CaptureSettings,
    ProducerSettings,
    ConsumerSettings,
    AuditLogSettings,
    LoggingSettings,
    get_settings,
)

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
