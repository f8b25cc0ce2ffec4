"""
Operator-facing alerts for the relay.

Raised when a message needs a human (undecodable date), when a transport
goes away, or when sinks keep failing. Alerts are best-effort: a failed
alert is logged and never replaces the pipeline's own error.
"""

import threading
import time
from typing import Callable

from src.utils import logger
from src.notifications.config import NotificationSettings, get_notification_settings
from src.notifications.slack import SlackNotifier, create_slack_notifier


class RelayNotifier:
    """
    Unified notifier for relay events.

    Events are always logged; Slack delivery honours the ALERT_* toggles and
    suppresses repeats of the same event within repeat_interval_seconds.
    """

    def __init__(
        self,
        slack: SlackNotifier | None = None,
        settings: NotificationSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the notifier.

        Args:
            slack: Slack notifier (created if not provided)
            settings: Alert toggles and repeat interval
            clock: Monotonic clock (injected in tests)
        """
        self.slack = slack or create_slack_notifier()
        self.alerts = (settings or get_notification_settings()).alerts
        self._clock = clock
        self._last_sent: dict[tuple[str, str], float] = {}
        # Producer capture thread and scheduler both raise transport alerts
        self._lock = threading.Lock()

        logger.info("RelayNotifier initialized")

    def _should_send(self, event: str, subject: str) -> bool:
        now = self._clock()
        with self._lock:
            last = self._last_sent.get((event, subject))
            if last is not None and now - last < self.alerts.repeat_interval_seconds:
                logger.debug(f"Suppressing repeated {event} alert for {subject}")
                return False
            self._last_sent[(event, subject)] = now
        return True

    def on_message_rejected(self, raw_line: str, reason: str) -> None:
        """A message was left unacknowledged and the consumer halted."""
        logger.critical(f"Message rejected: {reason} | line: {raw_line}")

        if not self.alerts.on_message_rejected:
            return
        self.slack.notify(
            title="🚨 Message Rejected",
            fields={"Reason": reason},
            detail=raw_line,
        )

    def on_transport_failure(self, component: str, error: str) -> None:
        """A broker, store, cache or feed connection failed."""
        logger.error(f"Transport failure in {component}: {error}")

        if not self.alerts.on_transport_failure:
            return
        if not self._should_send("transport_failure", component):
            return
        self.slack.notify(
            title="🔌 Transport Failure",
            fields={"Component": component},
            detail=error,
        )

    def on_sink_failure_limit(self, failure_count: int, last_error: str | None) -> None:
        """Sinks kept failing and the consumer gave up."""
        logger.error(f"Consumer stopping after {failure_count} consecutive sink failures")

        if not self.alerts.on_sink_failure_limit:
            return
        self.slack.notify(
            title="🛑 Consumer Stopped",
            fields={"Consecutive failures": str(failure_count)},
            detail=last_error,
        )


def create_notifier() -> RelayNotifier:
    """Create a new notifier."""
    return RelayNotifier()


_notifier: RelayNotifier | None = None


def get_notifier() -> RelayNotifier:
    """Get the global notifier instance."""
    global _notifier
    if _notifier is None:
        _notifier = create_notifier()
    return _notifier


__all__ = [
    "RelayNotifier",
    "create_notifier",
    "get_notifier",
]
