"""
Result cache with Redis primary and process-local fallback.
"""
import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from apps.core.exceptions import CacheDegraded
from .stores import LocalStore, RedisStore

logger = logging.getLogger(__name__)


class ResultCache:
    """
    Key/value cache that is always available.

    While the primary (Redis) store is connected every call is routed to
    it. Any primary failure flips the cache to the local store; the
    condition is logged and never surfaced to the caller. Reconnection is
    attempted in the background no more often than reconnect_interval and,
    on success, routes calls back to the primary. Entries written to the
    local store during an outage are not migrated.
    """

    def __init__(
        self,
        primary: Optional[RedisStore] = None,
        local: Optional[LocalStore] = None,
        connect_timeout: float = None,
        reconnect_interval: float = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        aq_settings = getattr(settings, 'AIR_QUALITY_SETTINGS', {})
        self.primary = primary
        self.local = local or LocalStore()
        self.connect_timeout = connect_timeout if connect_timeout is not None else aq_settings.get('CACHE_CONNECT_TIMEOUT', 2)
        self.reconnect_interval = reconnect_interval if reconnect_interval is not None else aq_settings.get('CACHE_RECONNECT_INTERVAL', 30)

        self._clock = clock
        self._lock = threading.Lock()
        self._primary_ready = False
        self._pending: Optional[Future] = None
        self._last_attempt: Optional[float] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='cache-connect')

    @classmethod
    def from_settings(cls) -> 'ResultCache':
        """Build a cache for the configured REDIS_URL (local only when unset)."""
        redis_url = settings.AIR_QUALITY_SETTINGS.get('REDIS_URL')
        primary = RedisStore(redis_url) if redis_url else None
        return cls(primary=primary)

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    @property
    def using_primary(self) -> bool:
        return self._primary_ready

    def start(self) -> Optional[Future]:
        """
        Begin connecting to the primary store in the background.

        Returns the connection Future (resolves to True/False), or None when
        there is no primary configured. Callers are never blocked.
        """
        return self._schedule_connect(force=True)

    def reconnect(self) -> Optional[Future]:
        """Force a reconnection attempt regardless of the retry interval."""
        return self._schedule_connect(force=True)

    def _schedule_connect(self, force: bool = False) -> Optional[Future]:
        if self.primary is None:
            return None

        with self._lock:
            if self._primary_ready:
                return None
            if self._pending is not None and not self._pending.done():
                return self._pending
            now = self._clock()
            if not force and self._last_attempt is not None and now - self._last_attempt < self.reconnect_interval:
                return None
            self._last_attempt = now
            try:
                self._pending = self._executor.submit(self._connect)
            except RuntimeError:
                # Executor already shut down
                return None
            return self._pending

    def _connect(self) -> bool:
        try:
            self.primary.connect(timeout=self.connect_timeout)
        except CacheDegraded as e:
            logger.warning(f"Primary cache unavailable, using in-memory cache: {e}")
            with self._lock:
                self._primary_ready = False
            return False

        with self._lock:
            self._primary_ready = True
        logger.info(f"Connected to primary cache at {self.primary.url}")
        return True

    def _degrade(self, error: Exception):
        with self._lock:
            was_ready = self._primary_ready
            self._primary_ready = False
            self._last_attempt = self._clock()
        if was_ready:
            logger.warning(f"Primary cache error, falling back to in-memory cache: {error}")
        else:
            logger.debug(f"Primary cache error while degraded: {error}")

    def _route(self):
        """Pick the backend for one call, kicking off a reconnect when due."""
        if self._primary_ready:
            return self.primary
        self._schedule_connect()
        return None

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or an expired entry."""
        raw = None
        primary = self._route()
        if primary is not None:
            try:
                raw = primary.get(key)
            except CacheDegraded as e:
                self._degrade(e)
                raw = self.local.get(key)
        else:
            raw = self.local.get(key)

        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: float):
        raw = json.dumps(value, cls=DjangoJSONEncoder)
        primary = self._route()
        if primary is not None:
            try:
                primary.set(key, raw, ttl_seconds)
                return
            except CacheDegraded as e:
                self._degrade(e)
        self.local.set(key, raw, ttl_seconds)

    def delete(self, key: str):
        primary = self._route()
        if primary is not None:
            try:
                primary.delete(key)
                return
            except CacheDegraded as e:
                self._degrade(e)
        self.local.delete(key)

    def flush_all(self):
        primary = self._route()
        if primary is not None:
            try:
                primary.flush()
                return
            except CacheDegraded as e:
                self._degrade(e)
        self.local.flush()

    def close(self):
        """Stop background reconnects and release the primary connection."""
        self._executor.shutdown(wait=True)
        with self._lock:
            self._primary_ready = False
        if self.primary is not None:
            self.primary.close()
