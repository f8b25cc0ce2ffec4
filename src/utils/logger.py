"""
Loguru-based logging for the SBS relay services.

pika, pymongo and APScheduler log through the standard library; their
records are routed into loguru so everything lands in the same sinks.

Usage:
    from src.utils import logger

    logger.info("Consuming from queue...")
"""

import logging
import sys
from pathlib import Path

from loguru import logger

logger.remove()

# Thread name distinguishes the capture thread from the publish scheduler
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{thread.name}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{thread.name} | "
    "{name}:{function}:{line} | "
    "{message}"
)

# Chatty at INFO; raised so they don't drown the relay's own messages
LIBRARY_LOGGERS = {
    "pika": logging.WARNING,
    "pymongo": logging.WARNING,
    "apscheduler": logging.INFO,
}


class InterceptHandler(logging.Handler):
    """Forwards standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_library_logging() -> None:
    """Route the standard library root logger into loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name, level in LIBRARY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def setup_logger(
    log_level: str = "DEBUG",
    log_dir: str | Path = "logs",
    log_file: str = "relay.log",
    rotation: str = "10 MB",
    retention: str = "7 days",
    enable_file: bool = True,
) -> None:
    """
    Configure stdout and (optionally) rotating file sinks.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the log file
        log_file: Log file name
        rotation: Rotation policy, e.g. "10 MB" or "00:00"
        retention: Retention policy, e.g. "7 days"
        enable_file: Also write to log_dir/log_file
    """
    logger.remove()

    logger.add(
        sys.stdout,
        format=LOG_FORMAT,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if enable_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # enqueue: capture thread and scheduler write concurrently
        logger.add(
            log_path / log_file,
            format=FILE_LOG_FORMAT,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    logger.info(f"Logger initialized with level={log_level}")


# Stdout only until main.py applies LoggingSettings
setup_logger(log_level="INFO", enable_file=False)


__all__ = ["logger", "setup_logger", "intercept_library_logging"]
