"""Components module for the relay services."""

from src.relay.components.capture import (
    CaptureSource,
    SocketCaptureSource,
    FileCaptureSource,
    create_capture_source,
)
from src.relay.components.publisher import QueuePublisher, create_publisher
from src.relay.components.consumer import Delivery, QueueConsumer, create_consumer

__all__ = [
    "CaptureSource",
    "SocketCaptureSource",
    "FileCaptureSource",
    "create_capture_source",
    "QueuePublisher",
    "create_publisher",
    "Delivery",
    "QueueConsumer",
    "create_consumer",
]
