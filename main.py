"""
SBS Relay - Entry Point

Run the producer (ADS-B feed → queue):
    python main.py producer

Run the consumer (queue → store, cache, audit log):
    python main.py consumer

Or import and use programmatically:
    from src.relay import create_producer_job, create_consumer_job

Environment variables:
    ADSB_SERVER: SBS feed address (default: 127.0.0.1:30003)
    PUBLISH_INTERVAL: Publish cadence in milliseconds (default: 1000)
    MESSAGE_QUEUE_HOST / RABBITMQ_USER / RABBITMQ_PASS / QUEUE_NAME: Broker
    NOSQL_DB_HOST / NOSQL_DB_NAME: Document store
    REDIS_HOST: Last-seen cache
"""

import argparse
import sys

from dotenv import load_dotenv
load_dotenv()

from src.utils.logger import intercept_library_logging, setup_logger, logger
from src.utils.exceptions import ConfigurationError, PipelineHaltError, QueueConnectionError
from src.relay.config import get_settings


def main() -> int:
    """Main entry point for the relay services."""
    parser = argparse.ArgumentParser(
        description="BaseStation (SBS-1) ADS-B relay"
    )
    parser.add_argument(
        "service",
        choices=["producer", "consumer"],
        help="Which side of the queue to run",
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Producer: publish what is buffered and exit. Consumer: drain until the queue is idle",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Producer publish interval in milliseconds (default: from settings)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: from settings)",
    )

    args = parser.parse_args()
    settings = get_settings()

    setup_logger(
        log_level=args.log_level or settings.logging.level,
        log_dir=settings.logging.log_dir,
        log_file=settings.logging.log_file,
        rotation=settings.logging.rotation,
        retention=settings.logging.retention,
    )
    intercept_library_logging()

    logger.info("=" * 60)
    logger.info(f"SBS RELAY {args.service.upper()}")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Queue: {settings.queue.queue_name} @ {settings.queue.host}")
    logger.info(f"Run once: {args.run_once}")

    if args.service == "producer":
        from src.relay.jobs import create_producer_job

        try:
            job = create_producer_job(settings, interval_ms=args.interval)
        except ConfigurationError as e:
            logger.critical(e.message)
            return 1
        if args.run_once:
            published = job.run_once()
            job.stop()
            logger.info(f"Published {published} messages")
        else:
            job.start()
        return 0

    from src.relay.jobs import create_consumer_job

    job = create_consumer_job(settings)
    try:
        processed = job.start(drain=args.run_once)
    except PipelineHaltError as e:
        logger.critical(f"Consumer halted: {e.message}")
        return 2
    except QueueConnectionError as e:
        logger.critical(f"Consumer lost the broker: {e.message}")
        return 1

    logger.info(f"Processed {processed} messages")
    return 0


if __name__ == "__main__":
    sys.exit(main())
