"""
Last-seen cache sink.

Keeps the most recently processed raw line under a single Redis key.
Last writer wins; the value is advisory and nothing reads it back.
"""

import redis
from redis.exceptions import RedisError

from src.utils import logger
from src.utils.exceptions import CacheWriteError
from src.relay.config import CacheSettings, get_settings


class LastSeenCacheSink:
    """Overwrites one well-known key with the latest raw line."""

    def __init__(self, client: redis.Redis, key: str = "lastMessage"):
        self.client = client
        self.key = key

        logger.info(f"LastSeenCacheSink initialized (key: {key})")

    def set_last(self, raw_line: str) -> None:
        """
        Overwrite the cached line.

        Raises:
            CacheWriteError: If Redis is unreachable or rejects the write
        """
        try:
            self.client.set(self.key, raw_line)
        except RedisError as e:
            raise CacheWriteError(f"Failed to set {self.key}: {e}") from e

    def close(self) -> None:
        self.client.close()


def create_cache_sink(settings: CacheSettings | None = None) -> LastSeenCacheSink:
    """Create a cache sink connected to the configured Redis."""
    settings = settings or get_settings().cache

    client = redis.Redis.from_url(
        settings.connection_url,
        socket_timeout=settings.timeout_seconds,
        socket_connect_timeout=settings.timeout_seconds,
    )

    logger.info(f"Connected to Redis at {settings.connection_url}")
    return LastSeenCacheSink(client, key=settings.key)


__all__ = ["LastSeenCacheSink", "create_cache_sink"]
