"""
Air quality service: cache lookup, index computation, caching and alert matching.
"""
import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.utils import timezone

from apps.alerts.matcher import AlertMatcher
from apps.alerts.registry import SubscriptionRegistry
from apps.aqi.calculator import calculate_index, normalize_concentrations
from apps.aqi.types import IndexResult
from apps.caching.cache import ResultCache
from apps.core.constants import LOCATION_ALERT_THRESHOLDS
from apps.core.utils import location_key, validate_concentrations, validate_coordinates

logger = logging.getLogger(__name__)


class AirQualityService:
    """
    Main service that coordinates:
    1. Input validation
    2. Cache lookup by location and query kind
    3. Index computation on a miss
    4. Caching the result
    5. Alert matching for freshly computed current results
    """

    def __init__(
        self,
        cache: ResultCache,
        registry: SubscriptionRegistry,
        matcher: AlertMatcher,
    ):
        self.settings = settings.AIR_QUALITY_SETTINGS
        self.cache = cache
        self.registry = registry
        self.matcher = matcher
        self.precision = self.settings.get('LOCATION_KEY_PRECISION', 4)
        self.current_ttl = self.settings.get('CURRENT_CACHE_TTL', 900)
        self.forecast_ttl = self.settings.get('FORECAST_CACHE_TTL', 3600)

    def _key(self, kind: str, lat: float, lng: float, *extra) -> Tuple[str, Tuple[float, float]]:
        key_lat, key_lng = location_key(lat, lng, self.precision)
        parts = [f"air-quality-{kind}", str(key_lat), str(key_lng)] + [str(part) for part in extra]
        return '-'.join(parts), (key_lat, key_lng)

    def get_current(self, lat: float, lng: float, concentrations: Dict) -> IndexResult:
        """
        Get the current classified index for coordinates.

        A cache hit is returned as-is and does not trigger alert matching.

        Args:
            lat: Latitude
            lng: Longitude
            concentrations: Pollutant -> concentration mapping from providers

        Returns:
            IndexResult

        Raises:
            InvalidInput: bad coordinates or a negative concentration
        """
        start_time = time.time()
        lat, lng = validate_coordinates(lat, lng)
        concentrations = validate_concentrations(concentrations)
        cache_key, loc_key = self._key('current', lat, lng)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key}")
            return IndexResult.from_dict(cached)

        result = calculate_index(concentrations, location_key=loc_key)
        self.cache.set(cache_key, result.to_dict(), self.current_ttl)

        self.matcher.process(result)

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(
            f"Computed AQI {result.overall_index} ({result.category.label}, "
            f"dominant {result.dominant_pollutant.label}) for {loc_key} in {execution_time}ms"
        )
        return result

    def get_forecast(
        self,
        lat: float,
        lng: float,
        daily_concentrations: Iterable[Tuple[str, Dict]],
    ) -> Dict:
        """
        Classify supplied per-day concentrations into a cached forecast.

        Forecasts never trigger alert matching.

        Args:
            lat: Latitude
            lng: Longitude
            daily_concentrations: (ISO date, concentrations) pairs

        Returns:
            Dict with location, per-day entries and generation time
        """
        lat, lng = validate_coordinates(lat, lng)
        days = [(day, validate_concentrations(values)) for day, values in daily_concentrations]
        cache_key, loc_key = self._key('forecast', lat, lng, len(days))

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        forecast = []
        for day, values in days:
            result = calculate_index(values, location_key=loc_key)
            forecast.append({
                'date': day,
                'aqi': result.overall_index,
                'category': result.category.slug,
                'category_label': result.category.label,
                'dominant_pollutant': result.dominant_pollutant.value,
                'health_message': result.health_message,
                'recommendations': list(result.recommendations),
                'pollutants': {
                    p.value: v for p, v in normalize_concentrations(values).items() if v is not None
                },
            })

        response = {
            'location': {'lat': loc_key[0], 'lng': loc_key[1]},
            'forecast': forecast,
            'generated_at': timezone.now().isoformat(),
        }
        self.cache.set(cache_key, response, self.forecast_ttl)
        return response

    def get_alerts(self, lat: float, lng: float, concentrations: Dict) -> Dict:
        """
        Escalating alert summary for the current index at a location.

        Returns:
            Dict with location, alert list, current AQI and timestamp
        """
        current = self.get_current(lat, lng, concentrations)
        return {
            'location': {'lat': current.lat, 'lng': current.lng},
            'alerts': build_location_alerts(current),
            'current_aqi': current.overall_index,
            'timestamp': timezone.now().isoformat(),
        }

    def subscribe(
        self,
        location: Tuple[float, float],
        channels: Dict[str, Optional[str]],
        alert_levels: Optional[Iterable] = None,
        current: Optional[IndexResult] = None,
    ) -> str:
        """
        Register a subscription and queue its welcome notification.

        A failing welcome notification never fails the subscription.
        """
        subscription_id = self.registry.subscribe(location, channels, alert_levels)

        if self.settings.get('SEND_WELCOME_NOTIFICATION', True):
            try:
                subscription = self.registry.get(subscription_id)
                self.matcher.send_welcome(subscription, current)
            except Exception as e:
                logger.exception(f"Welcome notification failed for {subscription_id}: {e}")

        return subscription_id

    def unsubscribe(self, subscription_id: str):
        self.registry.unsubscribe(subscription_id)


def build_location_alerts(result: IndexResult) -> List[Dict]:
    """Every threshold alert the overall index has reached, mildest first."""
    alerts = []
    for threshold in LOCATION_ALERT_THRESHOLDS:
        if result.overall_index >= threshold['min_value']:
            alerts.append({
                'type': threshold['type'],
                'level': threshold['level'],
                'message': threshold['message'],
                'recommendations': list(threshold['recommendations'] or result.recommendations),
            })
    return alerts
