"""
Backing stores for the result cache.

Both stores deal in already-serialized string values and enforce their
own expiry; the ResultCache decides which one a call is routed to.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis

from apps.core.exceptions import CacheDegraded

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    value: str
    expires_at: float


class LocalStore:
    """
    Process-local store with check-on-read expiry.

    A single lock guards the entry map, so concurrent get/set/delete calls
    are safe; conflicting sets resolve as last writer wins.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: float):
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + ttl_seconds,
            )

    def delete(self, key: str):
        with self._lock:
            self._entries.pop(key, None)

    def flush(self):
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._entries)


class RedisStore:
    """
    Networked primary store backed by Redis.

    Every failure is re-raised as CacheDegraded so the caller can fall back.
    """

    def __init__(self, url: str = 'redis://localhost:6379/0', client: Optional[redis.Redis] = None):
        self.url = url
        self._client = client
        self._preset_client = client is not None

    def connect(self, timeout: float) -> redis.Redis:
        """
        Open (or re-open) the connection and verify it with PING.

        Args:
            timeout: Seconds allowed for the socket connect and the PING

        Raises:
            CacheDegraded: if the server cannot be reached in time
        """
        try:
            if not self._preset_client:
                self.close()
                self._client = redis.Redis.from_url(
                    self.url,
                    socket_connect_timeout=timeout,
                    socket_timeout=timeout,
                )
            self._client.ping()
            return self._client
        except redis.RedisError as e:
            raise CacheDegraded(f"Redis connect to {self.url} failed: {e}") from e

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise CacheDegraded("Redis store is not connected")
        return self._client

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise CacheDegraded(f"Redis get failed: {e}") from e
        if value is None:
            return None
        return value.decode('utf-8') if isinstance(value, bytes) else value

    def set(self, key: str, value: str, ttl_seconds: float):
        ttl_ms = int(ttl_seconds * 1000)
        try:
            if ttl_ms <= 0:
                self.client.delete(key)
            else:
                self.client.set(key, value, px=ttl_ms)
        except redis.RedisError as e:
            raise CacheDegraded(f"Redis set failed: {e}") from e

    def delete(self, key: str):
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise CacheDegraded(f"Redis delete failed: {e}") from e

    def flush(self):
        try:
            self.client.flushdb()
        except redis.RedisError as e:
            raise CacheDegraded(f"Redis flush failed: {e}") from e

    def close(self):
        if self._client is not None and not self._preset_client:
            try:
                self._client.close()
            except redis.RedisError as e:
                logger.debug(f"Error closing Redis connection: {e}")
