"""
RabbitMQ consumer side of the queue relay.

Deliveries are handed out one at a time with manual acknowledgment. Anything
not acked before the channel closes goes back to the queue, so a crashed or
halted consumer never loses a line.
"""

import time
from typing import Iterator, NamedTuple

import pika
from pika.adapters.blocking_connection import BlockingChannel
from pika.exceptions import AMQPError

from src.utils import logger
from src.utils.exceptions import QueueConnectionError
from src.relay.config import QueueSettings, get_settings


class Delivery(NamedTuple):
    """A raw line plus the handle needed to settle it."""
    delivery_tag: int
    body: bytes
    redelivered: bool

    @property
    def raw_line(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class QueueConsumer:
    """
    Blocking consumer with prefetch-limited, manually acknowledged deliveries.
    """

    def __init__(
        self,
        url: str,
        queue_name: str,
        durable: bool = True,
        prefetch_count: int = 1,
        inactivity_timeout: float = 5.0,
    ):
        """
        Initialize the consumer.

        Args:
            url: AMQP URL of the broker
            queue_name: Queue to consume (declared on connect)
            durable: Must match how the producer declared the queue
            prefetch_count: Unacked deliveries the broker may push at once
            inactivity_timeout: Seconds to wait before yielding control with no delivery
        """
        self.url = url
        self.queue_name = queue_name
        self.durable = durable
        self.prefetch_count = prefetch_count
        self.inactivity_timeout = inactivity_timeout

        self._connection: pika.BlockingConnection | None = None
        self._channel: BlockingChannel | None = None

        logger.info(f"QueueConsumer initialized (queue: {queue_name}, prefetch: {prefetch_count})")

    def connect(self) -> None:
        """
        Raises:
            QueueConnectionError: If the broker is unreachable
        """
        try:
            logger.info("Connecting to RabbitMQ...")
            self._connection = pika.BlockingConnection(pika.URLParameters(self.url))
            self._channel = self._connection.channel()
            self._channel.queue_declare(queue=self.queue_name, durable=self.durable)
            self._channel.basic_qos(prefetch_count=self.prefetch_count)
        except AMQPError as e:
            self.close()
            raise QueueConnectionError(f"Failed to connect to RabbitMQ: {e!r}") from e

        logger.info(f"Connected to RabbitMQ, consuming from '{self.queue_name}'")

    def deliveries(self) -> Iterator[Delivery | None]:
        """
        Stream deliveries; yields None whenever the inactivity timeout passes.

        Raises:
            QueueConnectionError: If the connection drops mid-stream
        """
        if self._channel is None:
            self.connect()

        try:
            for method, properties, body in self._channel.consume(
                self.queue_name,
                auto_ack=False,
                inactivity_timeout=self.inactivity_timeout,
            ):
                if method is None:
                    yield None
                    continue
                yield Delivery(
                    delivery_tag=method.delivery_tag,
                    body=body,
                    redelivered=bool(method.redelivered),
                )
        except AMQPError as e:
            self.close()
            raise QueueConnectionError(f"Lost connection while consuming: {e!r}") from e

    def ack(self, delivery: Delivery) -> None:
        self._settle(lambda: self._channel.basic_ack(delivery_tag=delivery.delivery_tag))

    def nack(self, delivery: Delivery, requeue: bool = True) -> None:
        self._settle(
            lambda: self._channel.basic_nack(delivery_tag=delivery.delivery_tag, requeue=requeue)
        )

    def sleep(self, seconds: float) -> None:
        """
        Wait while keeping the broker connection serviced.

        BlockingConnection.sleep keeps answering heartbeats, so a long backoff
        with an unacked delivery does not get the connection dropped.

        Raises:
            QueueConnectionError: If the connection fails while waiting
        """
        connection = self._connection
        if connection is None or not connection.is_open:
            time.sleep(seconds)
            return

        try:
            connection.sleep(seconds)
        except AMQPError as e:
            self.close()
            raise QueueConnectionError(f"Lost connection while waiting: {e!r}") from e

    def _settle(self, action) -> None:
        try:
            action()
        except AMQPError as e:
            self.close()
            raise QueueConnectionError(f"Failed to settle delivery: {e!r}") from e

    def close(self) -> None:
        """Close the connection; unacked deliveries return to the queue."""
        connection, self._connection, self._channel = self._connection, None, None
        if connection is not None and connection.is_open:
            try:
                connection.close()
            except AMQPError as e:
                logger.warning(f"Error closing RabbitMQ connection: {e!r}")


def create_consumer(settings: QueueSettings | None = None, inactivity_timeout: float | None = None) -> QueueConsumer:
    """Create a consumer for the configured queue."""
    settings = settings or get_settings().queue
    return QueueConsumer(
        settings.url,
        settings.queue_name,
        durable=settings.durable,
        prefetch_count=settings.prefetch_count,
        inactivity_timeout=inactivity_timeout or get_settings().consumer.inactivity_timeout_seconds,
    )


__all__ = ["Delivery", "QueueConsumer", "create_consumer"]
