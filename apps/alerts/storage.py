"""
Pluggable storage for subscriptions.

The registry talks to a SubscriptionStore only; matching logic never
knows which backing store is in use.
"""
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from django.conf import settings

from apps.aqi.types import Category
from .types import Subscription

logger = logging.getLogger(__name__)


class SubscriptionStore(ABC):
    """Storage interface: insert / find / delete / list."""

    @abstractmethod
    def insert(self, subscription: Subscription):
        pass

    @abstractmethod
    def find(self, subscription_id: str) -> Optional[Subscription]:
        """Return the active subscription with this id, or None."""
        pass

    @abstractmethod
    def delete(self, subscription_id: str) -> bool:
        """Remove (or deactivate) a subscription. Returns False if unknown."""
        pass

    @abstractmethod
    def all_active(self) -> List[Subscription]:
        pass


class InMemorySubscriptionStore(SubscriptionStore):
    """Volatile store; subscriptions are lost on restart."""

    def __init__(self):
        self._subscriptions: Dict[str, Subscription] = {}

    def insert(self, subscription: Subscription):
        self._subscriptions[subscription.id] = subscription

    def find(self, subscription_id: str) -> Optional[Subscription]:
        return self._subscriptions.get(subscription_id)

    def delete(self, subscription_id: str) -> bool:
        return self._subscriptions.pop(subscription_id, None) is not None

    def all_active(self) -> List[Subscription]:
        return [sub for sub in self._subscriptions.values() if sub.active]


class DatabaseSubscriptionStore(SubscriptionStore):
    """Durable store on the AlertSubscription model; delete is a soft delete."""

    def insert(self, subscription: Subscription):
        from .models import AlertSubscription

        AlertSubscription.objects.create(
            subscription_id=subscription.id,
            lat=Decimal(str(subscription.lat)),
            lng=Decimal(str(subscription.lng)),
            email=subscription.email or '',
            phone=subscription.phone or '',
            alert_levels=sorted(level.slug for level in subscription.alert_levels),
            is_active=subscription.active,
        )

    def find(self, subscription_id: str) -> Optional[Subscription]:
        from .models import AlertSubscription

        try:
            record = AlertSubscription.objects.get(subscription_id=subscription_id, is_active=True)
        except AlertSubscription.DoesNotExist:
            return None
        return self._to_subscription(record)

    def delete(self, subscription_id: str) -> bool:
        from .models import AlertSubscription

        updated = AlertSubscription.objects.filter(
            subscription_id=subscription_id,
            is_active=True,
        ).update(is_active=False)
        return updated > 0

    def all_active(self) -> List[Subscription]:
        from .models import AlertSubscription

        return [
            self._to_subscription(record)
            for record in AlertSubscription.objects.filter(is_active=True)
        ]

    def _to_subscription(self, record) -> Subscription:
        return Subscription(
            id=record.subscription_id,
            lat=float(record.lat),
            lng=float(record.lng),
            alert_levels=frozenset(Category(slug) for slug in record.alert_levels),
            email=record.email or None,
            phone=record.phone or None,
            active=record.is_active,
            created_at=record.created_at,
        )


def store_from_settings() -> SubscriptionStore:
    """Pick the store named by SUBSCRIPTION_STORE ('memory' or 'database')."""
    backend = settings.AIR_QUALITY_SETTINGS.get('SUBSCRIPTION_STORE', 'memory')
    if backend == 'database':
        return DatabaseSubscriptionStore()
    if backend != 'memory':
        logger.warning(f"Unknown SUBSCRIPTION_STORE '{backend}', using in-memory store")
    return InMemorySubscriptionStore()
