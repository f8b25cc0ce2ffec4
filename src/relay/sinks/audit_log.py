"""
Per-day audit log sink.

Appends every processed raw line to <base_dir>/<date>/<date-with-dashes>.log,
e.g. 2024/06/01 -> <base_dir>/2024/06/01/2024-06-01.log. Files are only ever
opened in append mode; concurrent writers interleave whole lines. Each date
component must be a plain directory name, so a line from the feed can never
place a file outside base_dir.
"""

from pathlib import Path

from src.utils import logger
from src.utils.exceptions import AuditLogWriteError
from src.relay.config import AuditLogSettings, get_settings


def _is_safe_component(part: str) -> bool:
    if part in ("", ".", ".."):
        return False
    return not any(char in part for char in ("/", "\\", "\0"))


class AuditLogSink:
    """Append-only raw line log keyed by generated date."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

        logger.info(f"AuditLogSink initialized (dir: {self.base_dir})")

    def path_for(self, date: str) -> Path:
        """
        Log file path for a wire date (YYYY/MM/DD).

        Raises:
            AuditLogWriteError: If a date component would escape base_dir
        """
        parts = date.split("/")
        if len(parts) != 3 or any(not _is_safe_component(part) for part in parts):
            raise AuditLogWriteError(f"Refusing audit log path for date {date!r}")

        year, month, day = parts
        return self.base_dir / year / month / day / f"{year}-{month}-{day}.log"

    def append_line(self, date: str, raw_line: str) -> Path:
        """
        Append raw_line to the day's log.

        Returns:
            Path of the file written

        Raises:
            AuditLogWriteError: If the directory or file cannot be written
        """
        log_path = self.path_for(date)

        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(f"{raw_line}\n")
        except OSError as e:
            raise AuditLogWriteError(f"Failed to append to {log_path}: {e}", path=str(log_path)) from e

        return log_path


def create_audit_log_sink(settings: AuditLogSettings | None = None) -> AuditLogSink:
    """Create an audit log sink rooted at the configured directory."""
    settings = settings or get_settings().audit_log
    return AuditLogSink(settings.dir)


__all__ = ["AuditLogSink", "create_audit_log_sink"]
