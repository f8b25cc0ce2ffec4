"""Jobs module for the relay services."""

from src.relay.jobs.pipeline import (
    ProcessingOutcome,
    ProcessingResult,
    ConsumerPipeline,
)
from src.relay.jobs.consumer_job import ConsumerJob, create_consumer_job
from src.relay.jobs.producer_job import ProducerJob, create_producer_job

__all__ = [
    "ProcessingOutcome",
    "ProcessingResult",
    "ConsumerPipeline",
    "ConsumerJob",
    "create_consumer_job",
    "ProducerJob",
    "create_producer_job",
]
