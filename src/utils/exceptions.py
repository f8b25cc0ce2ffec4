"""
Custom exceptions for the SBS relay services.

Provides a hierarchy of exceptions for different error scenarios:
- Parse errors (BaseStation records, generated dates)
- Queue errors (broker connection, publishing)
- Sink errors (document store, cache, audit log)
- Pipeline halts (rejected messages, repeated sink failures)
- Configuration errors
"""


class RelayServiceError(Exception):
    """Base exception for all relay service errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


# =============================================================================
# Parse Exceptions
# =============================================================================

class ParseError(RelayServiceError):
    """Base exception for parse-related errors."""
    pass


class RecordParseError(ParseError):
    """Error when a BaseStation file record is too short to decode."""

    def __init__(self, message: str, line: str | None = None):
        self.line = line
        super().__init__(message)


class MalformedDateError(ParseError):
    """Error when generated_date does not split into year/month/day."""

    def __init__(self, generated_date: str):
        self.generated_date = generated_date
        super().__init__(f"Invalid generated_date format: {generated_date!r}")


# =============================================================================
# Queue Exceptions
# =============================================================================

class QueueError(RelayServiceError):
    """Base exception for message broker errors."""
    pass


class QueueConnectionError(QueueError):
    """Error when unable to connect to (or stay connected with) the broker."""
    pass


class PublishError(QueueError):
    """Error when the broker does not confirm a published message."""

    def __init__(self, message: str, queue_name: str | None = None):
        self.queue_name = queue_name
        super().__init__(message)


# =============================================================================
# Sink Exceptions
# =============================================================================

class SinkError(RelayServiceError):
    """Base exception for sink write failures."""

    sink_name = "sink"


class StoreWriteError(SinkError):
    """Error when the hierarchical document store rejects an append."""

    sink_name = "store"

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class CacheWriteError(SinkError):
    """Error when the last-seen cache cannot be overwritten."""

    sink_name = "cache"


class AuditLogWriteError(SinkError):
    """Error when the per-day audit log cannot be appended."""

    sink_name = "audit_log"

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


# =============================================================================
# Pipeline Halts
# =============================================================================

class PipelineHaltError(RelayServiceError):
    """Base exception for conditions that stop the consumer."""
    pass


class MessageRejectedError(PipelineHaltError):
    """A message cannot be keyed and was left unacknowledged."""

    def __init__(self, message: str, raw_line: str | None = None):
        self.raw_line = raw_line
        super().__init__(message)


class SinkFailureLimitError(PipelineHaltError):
    """Too many consecutive sink failures."""

    def __init__(self, failure_count: int, last_error: str | None = None):
        self.failure_count = failure_count
        self.last_error = last_error
        super().__init__(
            f"Stopping after {failure_count} consecutive sink failures: {last_error}"
        )


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(RelayServiceError):
    """Error with service configuration."""
    pass


# Export all exceptions
__all__ = [
    # Base
    "RelayServiceError",
    # Parse
    "ParseError",
    "RecordParseError",
    "MalformedDateError",
    # Queue
    "QueueError",
    "QueueConnectionError",
    "PublishError",
    # Sinks
    "SinkError",
    "StoreWriteError",
    "CacheWriteError",
    "AuditLogWriteError",
    # Pipeline
    "PipelineHaltError",
    "MessageRejectedError",
    "SinkFailureLimitError",
    # Configuration
    "ConfigurationError",
]
