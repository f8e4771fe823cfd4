"""
Subscription registry: create, remove and list location-based subscriptions.
"""
import logging
import threading
import uuid
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from django.utils import timezone

from apps.aqi.types import Category
from apps.core.constants import CHANNEL_EMAIL, CHANNEL_PHONE, DEFAULT_ALERT_LEVELS
from apps.core.exceptions import InvalidInput, NotFound
from apps.core.utils import validate_coordinates
from .storage import InMemorySubscriptionStore, SubscriptionStore
from .types import Subscription

logger = logging.getLogger(__name__)


def generate_subscription_id() -> str:
    return f"sub_{uuid.uuid4().hex[:12]}"


def parse_alert_levels(alert_levels: Iterable) -> frozenset:
    """
    Convert slugs, labels or Category members into a set of categories.

    Raises:
        InvalidInput: for an unknown level or an empty set
    """
    try:
        levels = frozenset(Category.parse(level) for level in alert_levels)
    except ValueError as e:
        raise InvalidInput(str(e))
    if not levels:
        raise InvalidInput("At least one alert level is required")
    return levels


class SubscriptionRegistry:
    """
    Thread-safe registry over a pluggable SubscriptionStore.

    One lock serializes subscribe/unsubscribe/list; readers get copies, so
    no caller holds the lock while doing slow work with the result.
    """

    def __init__(self, store: Optional[SubscriptionStore] = None):
        self.store = store or InMemorySubscriptionStore()
        self._lock = threading.Lock()

    def subscribe(
        self,
        location: Tuple[float, float],
        channels: Dict[str, Optional[str]],
        alert_levels: Optional[Iterable] = None,
    ) -> str:
        """
        Register a new subscription.

        Args:
            location: (lat, lng)
            channels: {'email': ..., 'phone': ...}; at least one must be set
            alert_levels: categories that trigger an alert (defaults to
                unhealthy, very-unhealthy and hazardous)

        Returns:
            The generated subscription id

        Raises:
            InvalidInput: no channel, no alert level, or bad coordinates
        """
        lat, lng = validate_coordinates(*location)

        email = (channels or {}).get(CHANNEL_EMAIL) or None
        phone = (channels or {}).get(CHANNEL_PHONE) or None
        if not email and not phone:
            raise InvalidInput("Either email or phone is required")

        if alert_levels is None:
            alert_levels = DEFAULT_ALERT_LEVELS
        levels = parse_alert_levels(alert_levels)

        subscription = Subscription(
            id=generate_subscription_id(),
            lat=lat,
            lng=lng,
            alert_levels=levels,
            email=email,
            phone=phone,
            active=True,
            created_at=timezone.now(),
        )

        with self._lock:
            self.store.insert(subscription)

        logger.info(f"Created subscription {subscription.id} at ({lat}, {lng})")
        return subscription.id

    def unsubscribe(self, subscription_id: str):
        """
        Remove a subscription from future matching.

        Raises:
            NotFound: if the id is unknown (or already unsubscribed)
        """
        with self._lock:
            removed = self.store.delete(subscription_id)

        if not removed:
            raise NotFound(f"Subscription not found: {subscription_id}")
        logger.info(f"Removed subscription {subscription_id}")

    def get(self, subscription_id: str) -> Subscription:
        with self._lock:
            subscription = self.store.find(subscription_id)
        if subscription is None:
            raise NotFound(f"Subscription not found: {subscription_id}")
        return subscription

    def list_active(self) -> List[Subscription]:
        with self._lock:
            return list(self.store.all_active())

    def select(self, predicate: Callable[[Subscription], bool]) -> List[Subscription]:
        """Snapshot of the active subscriptions that satisfy predicate."""
        with self._lock:
            return [sub for sub in self.store.all_active() if predicate(sub)]
