"""
Utility modules for the SBS relay services.

Provides:
    - logger: Loguru-based logging with stdout and file output
    - exceptions: Custom exception classes for error handling
"""

from src.utils.logger import logger, setup_logger
from src.utils.exceptions import (
    # Base
    RelayServiceError,
    # Parse
    ParseError,
    RecordParseError,
    MalformedDateError,
    # Queue
    QueueError,
    QueueConnectionError,
    PublishError,
    # Sinks
    SinkError,
    StoreWriteError,
    CacheWriteError,
    AuditLogWriteError,
    # Pipeline
    PipelineHaltError,
    MessageRejectedError,
    SinkFailureLimitError,
    # Configuration
    ConfigurationError,
)

__all__ = [
    # Logger
    "logger",
    "setup_logger",
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
