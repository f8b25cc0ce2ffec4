"""
Capture sources for the raw SBS feed.

A capture source yields one candidate line per next_line() call and never
parses it. None means "nothing this cycle": a read timeout, an empty line,
or a dropped connection. The caller keeps polling; the socket source
reconnects on the following call.
"""

import socket
from pathlib import Path
from typing import IO, Protocol

from src.utils import logger
from src.relay.config import CaptureSettings, get_settings


class CaptureSource(Protocol):
    def next_line(self) -> str | None: ...

    def close(self) -> None: ...


class SocketCaptureSource:
    """
    Line reader over a TCP BaseStation feed (dump1090 port 30003 and friends).

    Keeps one connection open across calls and applies a read timeout.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = 5.0,
    ):
        """
        Initialize the capture source.

        Args:
            host: Feed host
            port: Feed port
            timeout: Connect and read timeout in seconds
        """
        self.host = host
        self.port = port
        self.timeout = timeout

        self._socket: socket.socket | None = None
        # Bytes received after the last complete line
        self._buffer = b""

        logger.info(f"SocketCaptureSource initialized for {host}:{port}")

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def _connect(self) -> socket.socket:
        logger.info(f"Connecting to ADS-B server {self.host}:{self.port}...")
        sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        self._socket = sock
        self._buffer = b""
        logger.info(f"Connected to ADS-B server {self.host}:{self.port}")
        return sock

    def _take_line(self) -> str | None:
        line, sep, rest = self._buffer.partition(b"\n")
        if not sep:
            return None
        self._buffer = rest
        return line.decode("utf-8", errors="replace").strip()

    def next_line(self) -> str | None:
        """
        Read the next line from the feed.

        Returns:
            The stripped line, or None on timeout, empty line, EOF or error
        """
        line = self._take_line()
        if line is not None:
            return line or None

        try:
            # close() may run on another thread; a closed socket raises OSError
            sock = self._socket
            if sock is None:
                sock = self._connect()
            while b"\n" not in self._buffer:
                chunk = sock.recv(4096)
                if not chunk:
                    logger.warning(f"ADS-B server {self.host}:{self.port} closed the connection")
                    self.close()
                    return None
                self._buffer += chunk
        except socket.timeout:
            logger.debug("No data from ADS-B server within read timeout")
            return None
        except OSError as e:
            logger.error(f"Error reading ADS-B data from {self.host}:{self.port}: {e}")
            self.close()
            return None

        return self._take_line() or None

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._buffer = b""


class FileCaptureSource:
    """Replays a recorded SBS feed, one line per call."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._file: IO[str] | None = open(self.path, "r", encoding="utf-8")
        self.exhausted = False

        logger.info(f"FileCaptureSource replaying {self.path}")

    def next_line(self) -> str | None:
        while self._file is not None:
            line = self._file.readline()
            if not line:
                logger.info(f"Reached end of replay file {self.path}")
                self.exhausted = True
                self.close()
                return None
            line = line.strip()
            if line:
                return line
        return None

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


def create_capture_source(settings: CaptureSettings | None = None) -> CaptureSource:
    """Create the configured capture source (replay file or TCP feed)."""
    settings = settings or get_settings().capture

    if settings.replay_file:
        return FileCaptureSource(settings.replay_file)

    host, port = settings.address
    return SocketCaptureSource(host, port, timeout=settings.timeout_seconds)


__all__ = [
    "CaptureSource",
    "SocketCaptureSource",
    "FileCaptureSource",
    "create_capture_source",
]
