"""
Tests for Slack alerts, using httpx.MockTransport instead of the network.
"""

import json
from unittest.mock import Mock

import httpx

from src.notifications import (
    AlertSettings,
    NotificationSettings,
    RelayNotifier,
    SlackNotifier,
    SlackSettings,
)


WEBHOOK = "https://hooks.slack.test/services/T000/B000/XXXX"


def _settings(webhook_url=WEBHOOK, enabled=True):
    return NotificationSettings(
        slack=SlackSettings(enabled=enabled, webhook_url=webhook_url),
        environment="test",
        service_name="sbs-relay",
    )


def _notifier(handler, **kwargs):
    return SlackNotifier(settings=_settings(**kwargs), transport=httpx.MockTransport(handler))


def test_notify_posts_blocks_to_webhook():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="ok")

    sent = _notifier(handler).notify(
        title="Message Rejected",
        fields={"Reason": "bad date"},
        detail="STA",
    )

    assert sent is True
    assert len(requests) == 1
    assert str(requests[0].url) == WEBHOOK

    blocks = json.loads(requests[0].content)["blocks"]
    assert blocks[0]["text"]["text"] == "Message Rejected"
    field_texts = [field["text"] for field in blocks[1]["fields"]]
    assert field_texts == ["*Environment:*\ntest", "*Service:*\nsbs-relay", "*Reason:*\nbad date"]
    assert blocks[2]["text"]["text"] == "```STA```"
    assert blocks[-1]["type"] == "context"


def test_notify_reports_webhook_failure():
    notifier = _notifier(lambda request: httpx.Response(500, text="no_service"))

    assert notifier.notify(title="x", fields={}) is False


def test_notify_survives_transport_errors():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert _notifier(handler).notify(title="x", fields={}) is False


def test_notify_skipped_without_webhook():
    handler = Mock()

    notifier = _notifier(handler, webhook_url=None)

    assert notifier.enabled is False
    assert notifier.notify(title="x", fields={}) is False
    handler.assert_not_called()


def test_relay_notifier_events():
    slack = Mock()
    notifier = RelayNotifier(slack=slack, settings=_settings())

    notifier.on_message_rejected("STA", "Invalid generated_date format: ''")
    notifier.on_transport_failure("rabbitmq", "refused")
    notifier.on_sink_failure_limit(10, "[store] timeout")

    rejected, transport, limit = slack.notify.call_args_list
    assert rejected.kwargs["detail"] == "STA"
    assert rejected.kwargs["fields"] == {"Reason": "Invalid generated_date format: ''"}
    assert transport.kwargs["fields"] == {"Component": "rabbitmq"}
    assert limit.kwargs["fields"] == {"Consecutive failures": "10"}
    assert limit.kwargs["detail"] == "[store] timeout"


def test_repeated_transport_failures_are_throttled():
    slack = Mock()
    now = [1000.0]
    settings = _settings()
    settings.alerts = AlertSettings(repeat_interval_seconds=60)
    notifier = RelayNotifier(slack=slack, settings=settings, clock=lambda: now[0])

    notifier.on_transport_failure("rabbitmq", "refused")
    notifier.on_transport_failure("rabbitmq", "refused")
    notifier.on_transport_failure("adsb_feed", "disconnected")
    now[0] += 61
    notifier.on_transport_failure("rabbitmq", "refused")

    components = [c.kwargs["fields"]["Component"] for c in slack.notify.call_args_list]
    assert components == ["rabbitmq", "adsb_feed", "rabbitmq"]


def test_disabled_event_is_only_logged():
    slack = Mock()
    settings = _settings()
    settings.alerts = AlertSettings(on_message_rejected=False)
    notifier = RelayNotifier(slack=slack, settings=settings)

    notifier.on_message_rejected("STA", "Invalid generated_date format: ''")

    slack.notify.assert_not_called()
