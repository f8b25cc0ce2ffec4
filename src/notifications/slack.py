"""
Slack notification sender for relay alerts.

Sends operator alerts to a Slack channel via webhook.
"""

from datetime import datetime, timezone

import httpx

from src.utils import logger
from src.notifications.config import NotificationSettings, get_notification_settings


class SlackNotifier:
    """
    Sends notifications to Slack via incoming webhooks.

    Every alert uses the same block layout: a header, a field grid, an
    optional code block and a timestamp footer.
    """

    def __init__(
        self,
        settings: NotificationSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize Slack notifier.

        Args:
            settings: Notification settings (defaults to environment)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings or get_notification_settings()
        self.webhook_url = self.settings.slack.webhook_url
        self.enabled = self.settings.slack.enabled and bool(self.webhook_url)
        self.transport = transport

        if self.enabled:
            logger.info("Slack notifier initialized")
        elif not self.webhook_url:
            logger.warning("Slack webhook URL not configured, notifications disabled")
        else:
            logger.info("Slack notifier disabled")

    def _send(self, payload: dict) -> bool:
        """
        Send a message to Slack.

        Returns:
            True if successful, False otherwise
        """
        if not self.enabled:
            logger.debug("Slack disabled or not configured, skipping notification")
            return False

        try:
            with httpx.Client(
                timeout=self.settings.slack.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = client.post(self.webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send Slack notification: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Slack webhook failed: {response.status_code} - {response.text}")
            return False

        logger.info("Slack notification sent successfully")
        return True

    def notify(
        self,
        title: str,
        fields: dict[str, str],
        detail: str | None = None,
        timestamp: datetime | None = None,
    ) -> bool:
        """
        Send an alert.

        Args:
            title: Header text
            fields: Short label/value pairs shown in a grid
            detail: Longer text rendered as a code block
            timestamp: When the event occurred

        Returns:
            True if notification was sent successfully
        """
        timestamp = timestamp or datetime.now(timezone.utc)

        grid = {
            "Environment": self.settings.environment,
            "Service": self.settings.service_name,
            **fields,
        }

        blocks = [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": title, "emoji": True},
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}
                    for label, value in grid.items()
                ],
            },
        ]

        if detail:
            blocks.append(
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": f"```{detail}```"},
                }
            )

        blocks.append(
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": f"⏰ {timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}",
                    }
                ],
            }
        )

        return self._send({"blocks": blocks})


def create_slack_notifier() -> SlackNotifier:
    """Create a new Slack notifier."""
    return SlackNotifier()


__all__ = ["SlackNotifier", "create_slack_notifier"]
