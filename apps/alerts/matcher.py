"""
Alert matching: fresh index results -> dispatch requests for nearby subscribers.
"""
import logging
from typing import List, Optional

from django.conf import settings

from apps.aqi.types import IndexResult
from apps.core.utils import within_tolerance
from .dispatcher import AlertDispatcher
from .messages import build_alert_message, build_welcome_message
from .registry import SubscriptionRegistry
from .types import DispatchRequest, Subscription

logger = logging.getLogger(__name__)


class AlertMatcher:
    """
    Finds the subscriptions a result should alert and queues one request
    per present channel of each.

    Matching reads a snapshot of the registry and releases its lock before
    any request is queued. Queueing never blocks (see AlertDispatcher).
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        dispatcher: AlertDispatcher,
        tolerance: float = None,
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        if tolerance is None:
            tolerance = getattr(settings, 'AIR_QUALITY_SETTINGS', {}).get('ALERT_PROXIMITY_DEGREES', 0.1)
        self.tolerance = tolerance

    def find_matches(self, result: IndexResult) -> List[Subscription]:
        """Active subscriptions near the result whose levels include its category."""
        lat, lng = result.location_key

        def should_alert(subscription: Subscription) -> bool:
            return (
                result.category in subscription.alert_levels
                and within_tolerance(subscription.lat, subscription.lng, lat, lng, self.tolerance)
            )

        return self.registry.select(should_alert)

    def build_requests(self, result: IndexResult, subscriptions: List[Subscription]) -> List[DispatchRequest]:
        if not subscriptions:
            return []

        message = build_alert_message(result)
        return [
            DispatchRequest(
                subscription_id=subscription.id,
                channel=channel,
                contact=contact,
                message=message,
            )
            for subscription in subscriptions
            for channel, contact in subscription.channels.items()
        ]

    def process(self, result: IndexResult) -> List[DispatchRequest]:
        """
        Run one matching pass for a freshly computed result.

        Returns the requests that were queued.
        """
        matches = self.find_matches(result)
        requests = self.build_requests(result, matches)

        queued = [request for request in requests if self.dispatcher.submit(request)]

        if matches:
            logger.info(
                f"AQI {result.overall_index} ({result.category.label}) at {result.location_key}: "
                f"{len(matches)} subscriptions matched, {len(queued)} notifications queued"
            )
        else:
            logger.debug(f"No subscriptions matched result at {result.location_key}")
        return queued

    def send_welcome(self, subscription: Subscription, current: Optional[IndexResult] = None) -> List[DispatchRequest]:
        """Queue the post-subscribe confirmation to every present channel."""
        message = build_welcome_message(subscription, current)
        requests = [
            DispatchRequest(
                subscription_id=subscription.id,
                channel=channel,
                contact=contact,
                message=message,
            )
            for channel, contact in subscription.channels.items()
        ]
        return [request for request in requests if self.dispatcher.submit(request)]
