"""
Consumer pipeline: one raw SBS line in, three sink writes out.

For each delivered line:
1. Parse it (never fails)
2. Derive year.month.day.hex_ident from generated_date; an undecodable date
   rejects the message outright
3. Append the report to the hierarchical store
4. Append the raw line to the day's audit log and overwrite the last-seen cache
5. Report PROCESSED only if all three sinks succeeded

The pipeline never acknowledges anything itself; ConsumerJob settles the
delivery from the returned outcome.
"""

from enum import Enum
from typing import Any, NamedTuple

from src.utils import logger
from src.utils.exceptions import MalformedDateError, SinkError
from src.basestation import AircraftReport, HierarchicalKey, parse_message
from src.relay.sinks import AuditLogSink, HierarchicalStoreSink, LastSeenCacheSink


class ProcessingOutcome(str, Enum):
    """How a delivery should be settled."""
    PROCESSED = "processed"  # ack
    REJECTED = "rejected"  # leave unacked, halt for operator
    SINK_FAILED = "sink_failed"  # nack for redelivery


class ProcessingResult(NamedTuple):
    """Result of handling one raw line."""
    outcome: ProcessingOutcome
    report: AircraftReport
    key: HierarchicalKey | None = None
    error_message: str | None = None
    failed_sinks: tuple[str, ...] = ()

    @property
    def should_ack(self) -> bool:
        return self.outcome == ProcessingOutcome.PROCESSED


class ConsumerPipeline:
    """Parses a raw line and fans it out to the store, audit log and cache."""

    def __init__(
        self,
        store: HierarchicalStoreSink,
        audit_log: AuditLogSink,
        cache: LastSeenCacheSink,
        selector: dict[str, Any],
    ):
        """
        Initialize the pipeline.

        Args:
            store: Hierarchical store sink
            audit_log: Per-day raw line log
            cache: Last-seen cache
            selector: Filter choosing the aggregate document in the store
        """
        self.store = store
        self.audit_log = audit_log
        self.cache = cache
        self.selector = selector

        logger.info(f"ConsumerPipeline initialized (selector: {selector})")

    def handle(self, raw_line: str) -> ProcessingResult:
        """
        Process one raw line.

        Args:
            raw_line: Line exactly as delivered by the queue

        Returns:
            ProcessingResult telling the caller whether to ack
        """
        report = parse_message(raw_line)

        try:
            key = HierarchicalKey.from_report(report)
        except MalformedDateError as e:
            logger.error(f"{e.message} in line: {raw_line}")
            return ProcessingResult(
                outcome=ProcessingOutcome.REJECTED,
                report=report,
                error_message=e.message,
            )

        errors: list[SinkError] = []

        # Store completes (or fails) before the secondary sinks run
        try:
            self.store.append_report(self.selector, key, report)
        except SinkError as e:
            logger.error(f"Store write failed: {e.message}")
            errors.append(e)

        try:
            self.audit_log.append_line(report.generated_date, raw_line)
        except SinkError as e:
            logger.error(f"Audit log write failed: {e.message}")
            errors.append(e)

        try:
            self.cache.set_last(raw_line)
        except SinkError as e:
            logger.error(f"Cache write failed: {e.message}")
            errors.append(e)

        if errors:
            return ProcessingResult(
                outcome=ProcessingOutcome.SINK_FAILED,
                report=report,
                key=key,
                error_message="; ".join(f"[{e.sink_name}] {e.message}" for e in errors),
                failed_sinks=tuple(e.sink_name for e in errors),
            )

        logger.debug(f"Processed {report.message_kind} message at {key.path}")
        return ProcessingResult(
            outcome=ProcessingOutcome.PROCESSED,
            report=report,
            key=key,
        )

    def close(self) -> None:
        """Close the store and cache connections."""
        self.store.close()
        self.cache.close()


__all__ = ["ProcessingOutcome", "ProcessingResult", "ConsumerPipeline"]
