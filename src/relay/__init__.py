"""
Relay services for BaseStation (SBS-1) ADS-B telemetry.

This module provides:
- Capture sources for a TCP SBS feed or a recorded file
- RabbitMQ publisher and consumer
- Sinks: hierarchical MongoDB aggregate, Redis last-seen cache, per-day audit log
- Producer and consumer jobs

Quick start:
    from src.relay import create_producer_job, create_consumer_job
    create_producer_job().start()   # capture → queue
    create_consumer_job().start()   # queue → sinks

Configuration (environment variables):
    MESSAGE_QUEUE_HOST, RABBITMQ_USER, RABBITMQ_PASS, QUEUE_NAME: Broker
    NOSQL_DB_HOST, NOSQL_DB_NAME, STORE_PARTITION: Document store
    REDIS_HOST: Last-seen cache
    ADSB_SERVER, PUBLISH_INTERVAL: Capture and publish cadence
    AUDIT_LOG_DIR: Root of the per-day raw line logs
"""

from src.relay.config import Settings, get_settings
from src.relay.components import (
    SocketCaptureSource,
    FileCaptureSource,
    create_capture_source,
    QueuePublisher,
    create_publisher,
    Delivery,
    QueueConsumer,
    create_consumer,
)
from src.relay.sinks import (
    HierarchicalStoreSink,
    create_store_sink,
    LastSeenCacheSink,
    create_cache_sink,
    AuditLogSink,
    create_audit_log_sink,
)
from src.relay.jobs import (
    ProcessingOutcome,
    ProcessingResult,
    ConsumerPipeline,
    ConsumerJob,
    create_consumer_job,
    ProducerJob,
    create_producer_job,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Components
    "SocketCaptureSource",
    "FileCaptureSource",
    "create_capture_source",
    "QueuePublisher",
    "create_publisher",
    "Delivery",
    "QueueConsumer",
    "create_consumer",
    # Sinks
    "HierarchicalStoreSink",
    "create_store_sink",
    "LastSeenCacheSink",
    "create_cache_sink",
    "AuditLogSink",
    "create_audit_log_sink",
    # Jobs
    "ProcessingOutcome",
    "ProcessingResult",
    "ConsumerPipeline",
    "ConsumerJob",
    "create_consumer_job",
    "ProducerJob",
    "create_producer_job",
]
