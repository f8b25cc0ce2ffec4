"""
Producer job: capture SBS lines and publish them to the queue.

Capture blocks on a socket, so it runs on its own daemon thread and hands
lines over a bounded queue.Queue. Publishing runs as an APScheduler interval
job on the main thread, draining whatever the capture thread has buffered
and publishing each line with its own confirmed round-trip.
"""

import queue
import signal
import sys
import threading
from collections import deque
from datetime import datetime, timezone

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.utils import logger
from src.utils.exceptions import PublishError, QueueConnectionError
from src.relay.config import Settings, get_settings
from src.relay.components.capture import CaptureSource, create_capture_source
from src.relay.components.publisher import QueuePublisher, create_publisher
from src.notifications import RelayNotifier, get_notifier


class ProducerJob:
    """
    Capture → queue relay.

    Features:
    - Capture thread decoupled from publish cadence
    - Bounded hand-over channel (newest line dropped when full)
    - Lines that fail to publish are retried first on the next tick
    """

    def __init__(
        self,
        source: CaptureSource,
        publisher: QueuePublisher,
        interval_ms: int = 1000,
        batch_limit: int = 500,
        channel_size: int = 10000,
        notifier: RelayNotifier | None = None,
    ):
        """
        Initialize the producer.

        Args:
            source: Capture source yielding raw lines
            publisher: Queue publisher
            interval_ms: Publish job interval in milliseconds
            batch_limit: Maximum lines published per tick
            channel_size: Capacity of the capture → publish channel
            notifier: Operator alerts
        """
        self.source = source
        self.publisher = publisher
        self.interval_ms = interval_ms
        self.batch_limit = batch_limit
        self.notifier = notifier or get_notifier()

        self.channel: queue.Queue[str] = queue.Queue(maxsize=channel_size)
        self._pending: deque[str] = deque()
        self._stop_event = threading.Event()
        self._capture_thread: threading.Thread | None = None
        self._feed_down = False

        self.captured_count = 0
        self.dropped_count = 0
        self.published_count = 0
        self.failed_publish_count = 0

        self._scheduler = BlockingScheduler()
        self._setup_listeners()

        logger.info(f"ProducerJob initialized with {interval_ms}ms publish interval")

    # ------------------------------------------------------------------ capture

    def capture_once(self) -> bool:
        """
        Read one line from the source into the channel.

        Returns:
            True if a line was captured
        """
        line = self.source.next_line()
        if line is None:
            return False

        self.captured_count += 1
        try:
            self.channel.put_nowait(line)
        except queue.Full:
            self.dropped_count += 1
            logger.warning(f"Capture channel full, dropping line ({self.dropped_count} dropped)")
        return True

    def _capture_loop(self) -> None:
        idle_cycles = 0
        while not self._stop_event.is_set():
            if self.capture_once():
                idle_cycles = 0
                if self._feed_down:
                    logger.info("ADS-B feed recovered")
                    self._feed_down = False
                continue

            if self._stop_event.is_set():
                return

            if getattr(self.source, "exhausted", False):
                logger.info("Replay finished, capture thread exiting")
                return

            idle_cycles += 1
            logger.debug("No data captured")
            if getattr(self.source, "connected", True):
                # Read timeouts already pace a live feed
                continue

            if not self._feed_down:
                self._feed_down = True
                self.notifier.on_transport_failure("adsb_feed", "Capture source disconnected")
            self._stop_event.wait(min(idle_cycles, 30) * 0.1)

    def start_capture(self) -> None:
        """Start the capture thread."""
        if self._capture_thread is not None and self._capture_thread.is_alive():
            return
        self._stop_event.clear()
        self._capture_thread = threading.Thread(
            target=self._capture_loop,
            name="sbs-capture",
            daemon=True,
        )
        self._capture_thread.start()
        logger.info("Capture thread started")

    # ------------------------------------------------------------------ publish

    def _next_line(self) -> str | None:
        if self._pending:
            return self._pending.popleft()
        try:
            return self.channel.get_nowait()
        except queue.Empty:
            return None

    def publish_pending(self) -> int:
        """
        Publish up to batch_limit buffered lines, one round-trip each.

        Returns:
            Number of lines published this tick
        """
        published = 0

        while published < self.batch_limit:
            line = self._next_line()
            if line is None:
                break

            try:
                self.publisher.publish(line)
            except (QueueConnectionError, PublishError) as e:
                self.failed_publish_count += 1
                self._pending.appendleft(line)
                logger.error(f"Failed to publish message: {e.message}")
                if isinstance(e, QueueConnectionError):
                    self.notifier.on_transport_failure("rabbitmq", e.message)
                break

            published += 1
            self.published_count += 1

        if published:
            logger.info(f"Published {published} messages ({self.published_count} total)")
        return published

    # ---------------------------------------------------------------- scheduler

    def _setup_listeners(self) -> None:
        self._scheduler.add_listener(self._on_job_executed, EVENT_JOB_EXECUTED)
        self._scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)

    def _on_job_executed(self, event: JobExecutionEvent) -> None:
        logger.debug(f"Job {event.job_id} executed at {datetime.now(timezone.utc)}")

    def _on_job_error(self, event: JobExecutionEvent) -> None:
        logger.error(f"Job {event.job_id} failed with exception: {event.exception}")
        logger.error(event.traceback)

    def _shutdown(self, signum: int, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.stop()
        sys.exit(0)

    def add_publish_job(self) -> None:
        self._scheduler.add_job(
            self.publish_pending,
            trigger=IntervalTrigger(seconds=self.interval_ms / 1000),
            id="publish_lines",
            name="Publish captured SBS lines",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info(f"Added publish job (every {self.interval_ms}ms)")

    def run_once(self) -> int:
        """Capture until the source is idle or the channel is full, then publish it all."""
        while not self.channel.full() and self.capture_once():
            pass
        total = 0
        while True:
            published = self.publish_pending()
            total += published
            if published < self.batch_limit:
                break
        return total

    def start(self) -> None:
        """Start capture and the (blocking) publish scheduler."""
        signal.signal(signal.SIGINT, self._shutdown)
        signal.signal(signal.SIGTERM, self._shutdown)

        logger.info("=" * 60)
        logger.info("STARTING PRODUCER")
        logger.info(f"Publish interval: {self.interval_ms} ms")
        logger.info(f"Queue: {self.publisher.queue_name}")
        logger.info("=" * 60)

        self.start_capture()
        self.add_publish_job()
        self._scheduler.start()

    def stop(self) -> None:
        """Stop capture, the scheduler and close connections."""
        logger.info("Stopping producer...")
        self._stop_event.set()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        if self._capture_thread is not None:
            self._capture_thread.join(timeout=5)
        self.source.close()
        self.publisher.close()
        logger.info(
            f"Producer stopped: captured={self.captured_count} published={self.published_count} "
            f"dropped={self.dropped_count}"
        )


def create_producer_job(
    settings: Settings | None = None,
    interval_ms: int | None = None,
) -> ProducerJob:
    """Wire capture, publisher and scheduler from settings."""
    settings = settings or get_settings()

    return ProducerJob(
        source=create_capture_source(settings.capture),
        publisher=create_publisher(settings.queue),
        interval_ms=interval_ms or settings.producer.publish_interval_ms,
        batch_limit=settings.producer.publish_batch_limit,
        channel_size=settings.capture.channel_size,
    )


__all__ = ["ProducerJob", "create_producer_job"]
