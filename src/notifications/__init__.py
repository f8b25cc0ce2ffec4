"""
Notifications module for Slack alerts.

Provides operator alerting for the relay via Slack webhooks.

Usage:
    from src.notifications import get_notifier

    notifier = get_notifier()
    notifier.on_message_rejected(raw_line="STA", reason="Invalid generated_date format: ''")
    notifier.on_transport_failure(component="rabbitmq", error="Connection refused")

Configuration (environment variables):
    SLACK_ENABLED: Enable Slack notifications (default: true)
    SLACK_WEBHOOK_URL: Slack incoming webhook URL (required)
    ALERT_ON_TRANSPORT_FAILURE, ALERT_REPEAT_INTERVAL_SECONDS: Alert toggles and throttling
"""

from src.notifications.config import (
    SlackSettings,
    AlertSettings,
    NotificationSettings,
    get_notification_settings,
)
from src.notifications.slack import (
    SlackNotifier,
    create_slack_notifier,
)
from src.notifications.notifier import (
    RelayNotifier,
    create_notifier,
    get_notifier,
)

__all__ = [
    # Config
    "SlackSettings",
    "AlertSettings",
    "NotificationSettings",
    "get_notification_settings",
    # Slack
    "SlackNotifier",
    "create_slack_notifier",
    # Main notifier
    "RelayNotifier",
    "create_notifier",
    "get_notifier",
]
