"""
RabbitMQ publisher for raw SBS lines.

Each publish is one confirmed round-trip: the channel runs in publisher
confirm mode, so publish() only returns once the broker has taken the
message. No batching.
"""

import pika
from pika.adapters.blocking_connection import BlockingChannel
from pika.exceptions import AMQPError, NackError, UnroutableError

from src.utils import logger
from src.utils.exceptions import PublishError, QueueConnectionError
from src.relay.config import QueueSettings, get_settings


PERSISTENT_DELIVERY_MODE = 2


class QueuePublisher:
    """
    Publishes raw lines to a durable queue on the default exchange.

    The connection is opened lazily and re-opened after a failure.
    """

    def __init__(
        self,
        url: str,
        queue_name: str,
        durable: bool = True,
    ):
        """
        Initialize the publisher.

        Args:
            url: AMQP URL of the broker
            queue_name: Queue to publish into (declared on connect)
            durable: Declare the queue durable and publish persistent messages
        """
        self.url = url
        self.queue_name = queue_name
        self.durable = durable

        self._connection: pika.BlockingConnection | None = None
        self._channel: BlockingChannel | None = None

        logger.info(f"QueuePublisher initialized (queue: {queue_name})")

    def connect(self) -> None:
        """
        Open the connection, declare the queue and enable confirms.

        Raises:
            QueueConnectionError: If the broker is unreachable
        """
        if self._channel is not None and self._channel.is_open:
            return

        try:
            logger.info("Connecting to RabbitMQ...")
            self._connection = pika.BlockingConnection(pika.URLParameters(self.url))
            self._channel = self._connection.channel()
            self._channel.queue_declare(queue=self.queue_name, durable=self.durable)
            self._channel.confirm_delivery()
        except AMQPError as e:
            self.close()
            raise QueueConnectionError(f"Failed to connect to RabbitMQ: {e!r}") from e

        logger.info(f"Connected to RabbitMQ, publishing to '{self.queue_name}'")

    def publish(self, raw_line: str) -> None:
        """
        Publish one raw line and wait for the broker's confirm.

        Raises:
            QueueConnectionError: If the broker cannot be reached
            PublishError: If the broker rejects the message
        """
        self.connect()

        properties = pika.BasicProperties(
            content_type="text/plain",
            delivery_mode=PERSISTENT_DELIVERY_MODE if self.durable else None,
        )

        try:
            self._channel.basic_publish(
                exchange="",
                routing_key=self.queue_name,
                body=raw_line.encode("utf-8"),
                properties=properties,
                mandatory=True,
            )
        except (NackError, UnroutableError) as e:
            raise PublishError(f"Broker rejected message: {e!r}", queue_name=self.queue_name) from e
        except AMQPError as e:
            self.close()
            raise QueueConnectionError(f"Lost connection while publishing: {e!r}") from e

        logger.debug(f"Published message: {raw_line}")

    def close(self) -> None:
        connection, self._connection, self._channel = self._connection, None, None
        if connection is not None and connection.is_open:
            try:
                connection.close()
            except AMQPError as e:
                logger.warning(f"Error closing RabbitMQ connection: {e!r}")


def create_publisher(settings: QueueSettings | None = None) -> QueuePublisher:
    """Create a publisher for the configured queue."""
    settings = settings or get_settings().queue
    return QueuePublisher(settings.url, settings.queue_name, durable=settings.durable)


__all__ = ["QueuePublisher", "create_publisher"]
