"""
Explicit construction and shutdown of the air quality components.

Build order: cache -> registry -> notifier -> dispatcher -> matcher -> service.
Shutdown runs in reverse: pending dispatch work is flushed before the
cache connection is released.
"""
import logging
from typing import Optional

from apps.alerts.dispatcher import AlertDispatcher
from apps.alerts.matcher import AlertMatcher
from apps.alerts.notifiers import Notifier
from apps.alerts.registry import SubscriptionRegistry
from apps.alerts.storage import SubscriptionStore, store_from_settings
from apps.caching.cache import ResultCache
from .services import AirQualityService

logger = logging.getLogger(__name__)


class AirQualityCore:
    """Owns one instance of every component; no process-wide singletons."""

    def __init__(
        self,
        cache: Optional[ResultCache] = None,
        store: Optional[SubscriptionStore] = None,
        notifier: Optional[Notifier] = None,
        queue_size: int = None,
        workers: int = None,
    ):
        self.cache = cache or ResultCache.from_settings()
        self.registry = SubscriptionRegistry(store or store_from_settings())
        self.notifier = notifier or Notifier()
        self.dispatcher = AlertDispatcher(self.notifier, queue_size=queue_size, workers=workers)
        self.matcher = AlertMatcher(self.registry, self.dispatcher)
        self.service = AirQualityService(self.cache, self.registry, self.matcher)
        self._started = False

    def start(self) -> 'AirQualityCore':
        if not self._started:
            self.cache.start()
            self.dispatcher.start()
            self._started = True
            logger.info("Air quality core started")
        return self

    def shutdown(self, wait: bool = True):
        """Flush pending dispatch work, then close the cache."""
        self.dispatcher.shutdown(wait=wait)
        self.cache.close()
        self._started = False
        logger.info("Air quality core stopped")

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.shutdown(wait=True)
        return False
