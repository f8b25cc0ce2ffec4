"""
Tests for the producer job: capture hand-over and publishing.

The scheduler is never started; publish ticks are called directly.
"""

from unittest.mock import Mock

from src.relay.components import FileCaptureSource
from src.relay.jobs import ProducerJob
from src.utils.exceptions import PublishError, QueueConnectionError


def _source(lines):
    source = Mock()
    source.next_line.side_effect = list(lines) + [None] * 10
    source.exhausted = False
    source.connected = True
    return source


def _job(source=None, publisher=None, **kwargs):
    publisher = publisher or Mock()
    publisher.queue_name = "adsb_data"
    return ProducerJob(
        source or _source([]),
        publisher,
        notifier=Mock(),
        **kwargs,
    )


def _published(publisher):
    return [c.args[0] for c in publisher.publish.call_args_list]


def test_capture_once_moves_line_into_channel():
    job = _job(_source(["MSG,1"]))

    assert job.capture_once() is True
    assert job.capture_once() is False
    assert job.channel.get_nowait() == "MSG,1"
    assert job.captured_count == 1


def test_full_channel_drops_newest_line():
    job = _job(_source(["MSG,1", "MSG,2"]), channel_size=1)

    job.capture_once()
    job.capture_once()

    assert job.dropped_count == 1
    assert job.channel.get_nowait() == "MSG,1"


def test_publish_respects_batch_limit_and_order():
    job = _job(batch_limit=2)
    for i in range(5):
        job.channel.put_nowait(f"MSG,{i}")

    assert job.publish_pending() == 2
    assert job.publish_pending() == 2
    assert job.publish_pending() == 1
    assert _published(job.publisher) == [f"MSG,{i}" for i in range(5)]


def test_failed_line_is_retried_first():
    """A rejected publish is put back at the head of the line."""
    publisher = Mock()
    publisher.publish.side_effect = [None, PublishError("nacked", queue_name="adsb_data"), None, None]
    job = _job(publisher=publisher)
    for line in ("a", "b", "c"):
        job.channel.put_nowait(line)

    assert job.publish_pending() == 1
    assert job.publish_pending() == 2

    assert _published(publisher) == ["a", "b", "b", "c"]
    assert job.failed_publish_count == 1
    assert job.published_count == 3
    job.notifier.on_transport_failure.assert_not_called()


def test_broker_loss_notifies_and_keeps_line():
    publisher = Mock()
    publisher.publish.side_effect = QueueConnectionError("connection refused")
    job = _job(publisher=publisher)
    job.channel.put_nowait("MSG,1")

    assert job.publish_pending() == 0

    job.notifier.on_transport_failure.assert_called_once_with("rabbitmq", "connection refused")
    assert job._next_line() == "MSG,1"


def test_run_once_publishes_everything_captured():
    job = _job(_source([f"MSG,{i}" for i in range(5)]), batch_limit=2)

    assert job.run_once() == 5
    assert _published(job.publisher) == [f"MSG,{i}" for i in range(5)]


def test_capture_thread_replays_file(tmp_path):
    replay = tmp_path / "feed.sbs"
    replay.write_text("MSG,1\nMSG,2\nMSG,3\n", encoding="utf-8")
    job = _job(FileCaptureSource(replay))

    job.start_capture()
    job._capture_thread.join(timeout=5)

    assert not job._capture_thread.is_alive()
    assert [job.channel.get_nowait() for _ in range(3)] == ["MSG,1", "MSG,2", "MSG,3"]


def test_disconnected_feed_is_reported_once():
    source = Mock()
    source.next_line.return_value = None
    source.exhausted = False
    source.connected = False
    job = _job(source)
    job.notifier.on_transport_failure.side_effect = lambda *args: job._stop_event.set()

    job.start_capture()
    job._capture_thread.join(timeout=5)

    job.notifier.on_transport_failure.assert_called_once_with("adsb_feed", "Capture source disconnected")


def test_stop_closes_source_and_publisher():
    job = _job()

    job.stop()

    job.source.close.assert_called_once()
    job.publisher.close.assert_called_once()


def test_stopping_capture_does_not_report_feed_loss():
    """A source closed by stop() is not alerted as a disconnected feed."""
    source = Mock()
    source.exhausted = False
    source.connected = False
    job = _job(source)

    def next_line():
        job._stop_event.set()
        return None

    source.next_line.side_effect = next_line

    job.start_capture()
    job._capture_thread.join(timeout=5)

    assert not job._capture_thread.is_alive()
    job.notifier.on_transport_failure.assert_not_called()
