"""
Consumer job: drains the queue through the ConsumerPipeline.

Settlement policy per delivery:
- PROCESSED: ack
- SINK_FAILED: exponential backoff, then nack with requeue; stop after too
  many consecutive failures
- REJECTED: alert the operator, leave the message unacked and stop; closing
  the channel hands it back to the broker for redelivery/inspection

Broker connection failures are retried with backoff up to a limit, then
re-raised.
"""

import signal
from typing import Callable

from src.utils import logger
from src.utils.exceptions import (
    MessageRejectedError,
    QueueConnectionError,
    SinkFailureLimitError,
)
from src.relay.config import ConsumerSettings, Settings, get_settings
from src.relay.components.consumer import Delivery, QueueConsumer, create_consumer
from src.relay.jobs.pipeline import ConsumerPipeline, ProcessingOutcome, ProcessingResult
from src.relay.sinks import create_audit_log_sink, create_cache_sink, create_store_sink
from src.notifications import RelayNotifier, get_notifier


class ConsumerJob:
    """
    Long-running consumer processing one delivery at a time.

    Acknowledgment order follows processing order because deliveries are
    handled strictly sequentially.
    """

    def __init__(
        self,
        consumer: QueueConsumer,
        pipeline: ConsumerPipeline,
        settings: ConsumerSettings,
        notifier: RelayNotifier | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """
        Initialize the consumer job.

        Args:
            consumer: Queue consumer
            pipeline: Pipeline handling each raw line
            settings: Backoff and failure limits
            notifier: Operator alerts
            sleep: Sleep function (defaults to consumer.sleep, which keeps
                broker heartbeats flowing)
        """
        self.consumer = consumer
        self.pipeline = pipeline
        self.settings = settings
        self.notifier = notifier or get_notifier()
        self._sleep = sleep or consumer.sleep

        self.processed_count = 0
        self.consecutive_failures = 0
        self.reconnect_attempts = 0
        self._stopping = False

        logger.info("ConsumerJob initialized")

    def _backoff(self, attempt: int) -> float:
        delay = self.settings.retry_backoff_seconds * (2 ** (attempt - 1))
        return min(delay, self.settings.retry_backoff_max_seconds)

    def process_delivery(self, delivery: Delivery) -> ProcessingResult:
        """
        Run one delivery through the pipeline and settle it.

        Raises:
            MessageRejectedError: If the message cannot be keyed
            SinkFailureLimitError: If sinks failed too many times in a row
            QueueConnectionError: If the delivery cannot be settled
        """
        raw_line = delivery.raw_line
        if delivery.redelivered:
            logger.info(f"Received redelivered message: {raw_line}")
        else:
            logger.debug(f"Received message: {raw_line}")

        result = self.pipeline.handle(raw_line)

        if result.should_ack:
            self.consumer.ack(delivery)
            self.consecutive_failures = 0
            self.reconnect_attempts = 0
            self.processed_count += 1
            logger.debug(f"Acknowledged delivery {delivery.delivery_tag}")
            return result

        if result.outcome == ProcessingOutcome.REJECTED:
            self.notifier.on_message_rejected(raw_line, result.error_message or "unknown")
            # Unacked: returns to the queue once the channel closes
            self.consumer.close()
            raise MessageRejectedError(result.error_message or "Message rejected", raw_line=raw_line)

        self.consecutive_failures += 1
        logger.warning(
            f"Sink failure {self.consecutive_failures}/{self.settings.max_consecutive_failures} "
            f"for delivery {delivery.delivery_tag}: {result.error_message}"
        )

        if self.consecutive_failures >= self.settings.max_consecutive_failures:
            self.consumer.nack(delivery, requeue=True)
            self.notifier.on_sink_failure_limit(self.consecutive_failures, result.error_message)
            raise SinkFailureLimitError(self.consecutive_failures, result.error_message)

        delay = self._backoff(self.consecutive_failures)
        logger.info(f"Backing off {delay:.1f}s before requeueing delivery {delivery.delivery_tag}")
        self._sleep(delay)
        self.consumer.nack(delivery, requeue=True)
        return result

    def _consume(self, drain: bool) -> None:
        for delivery in self.consumer.deliveries():
            if self._stopping:
                break
            if delivery is None:
                if drain:
                    logger.info("Queue idle, stopping drain")
                    break
                continue
            self.process_delivery(delivery)

    def run(self, drain: bool = False) -> int:
        """
        Consume until stopped (or until the queue is idle when drain=True).

        Returns:
            Number of messages processed and acknowledged

        Raises:
            PipelineHaltError: On a rejected message or sink failure limit
            QueueConnectionError: When reconnect attempts are exhausted
        """
        while not self._stopping:
            try:
                self._consume(drain)
                break
            except QueueConnectionError as e:
                self.reconnect_attempts += 1
                attempts = self.reconnect_attempts
                self.notifier.on_transport_failure("rabbitmq", e.message)
                if attempts > self.settings.reconnect_attempts:
                    logger.error(f"Giving up after {attempts - 1} reconnect attempts")
                    raise
                delay = self._backoff(attempts)
                logger.warning(f"Reconnecting to RabbitMQ in {delay:.1f}s (attempt {attempts})")
                self.consumer.close()
                self._sleep(delay)

        self.consumer.close()
        logger.info(f"Consumer stopped after processing {self.processed_count} messages")
        return self.processed_count

    def stop(self) -> None:
        """Ask the consume loop to exit at the next delivery or idle tick."""
        self._stopping = True

    def _shutdown(self, signum: int, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.stop()

    def start(self, drain: bool = False) -> int:
        """Install signal handlers and run."""
        signal.signal(signal.SIGINT, self._shutdown)
        signal.signal(signal.SIGTERM, self._shutdown)

        logger.info("=" * 60)
        logger.info("STARTING CONSUMER")
        logger.info(f"Queue: {self.consumer.queue_name}")
        logger.info("=" * 60)

        try:
            return self.run(drain=drain)
        finally:
            self.pipeline.close()


def create_consumer_job(settings: Settings | None = None) -> ConsumerJob:
    """Wire the consumer, sinks and pipeline from settings."""
    settings = settings or get_settings()

    pipeline = ConsumerPipeline(
        store=create_store_sink(settings.store),
        audit_log=create_audit_log_sink(settings.audit_log),
        cache=create_cache_sink(settings.cache),
        selector=settings.store.selector,
    )
    consumer = create_consumer(
        settings.queue,
        inactivity_timeout=settings.consumer.inactivity_timeout_seconds,
    )

    return ConsumerJob(consumer, pipeline, settings.consumer)


__all__ = ["ConsumerJob", "create_consumer_job"]
