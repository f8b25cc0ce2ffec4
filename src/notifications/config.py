"""
Operator alert settings.

SLACK_* variables configure the webhook, ALERT_* variables decide which relay
events page someone and how often a repeating one is resent.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SlackSettings(BaseSettings):
    """Slack incoming webhook."""

    enabled: bool = Field(default=True)
    # Alerts are skipped entirely while unset
    webhook_url: str | None = Field(default=None)
    timeout_seconds: float = Field(default=10.0)

    model_config = SettingsConfigDict(env_prefix="SLACK_")


class AlertSettings(BaseSettings):
    """Which relay events are sent to Slack."""

    on_message_rejected: bool = Field(default=True)
    on_transport_failure: bool = Field(default=True)
    on_sink_failure_limit: bool = Field(default=True)
    # Same event for the same component is resent at most this often
    repeat_interval_seconds: float = Field(default=300.0)

    model_config = SettingsConfigDict(env_prefix="ALERT_")


class NotificationSettings(BaseSettings):
    slack: SlackSettings = Field(default_factory=SlackSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)

    # Shown on every alert
    environment: str = Field(default="development")
    service_name: str = Field(default="sbs-relay")

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")


_notification_settings: NotificationSettings | None = None


def get_notification_settings() -> NotificationSettings:
    global _notification_settings
    if _notification_settings is None:
        _notification_settings = NotificationSettings()
    return _notification_settings


__all__ = [
    "SlackSettings",
    "AlertSettings",
    "NotificationSettings",
    "get_notification_settings",
]
