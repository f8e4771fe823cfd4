"""
Value types for subscriptions and dispatch.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple

from apps.aqi.types import Category
from apps.core.constants import CHANNEL_EMAIL, CHANNEL_PHONE


@dataclass(frozen=True)
class Subscription:
    """
    A location-based alert subscription.

    Location and channels never change after creation; unsubscribing
    deactivates or removes the subscription.
    """
    id: str
    lat: float
    lng: float
    alert_levels: FrozenSet[Category]
    email: Optional[str] = None
    phone: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None

    @property
    def location(self) -> Tuple[float, float]:
        return self.lat, self.lng

    @property
    def channels(self) -> Dict[str, str]:
        """Present channels only, email first."""
        channels = {}
        if self.email:
            channels[CHANNEL_EMAIL] = self.email
        if self.phone:
            channels[CHANNEL_PHONE] = self.phone
        return channels

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'location': {'lat': self.lat, 'lng': self.lng},
            'email': self.email,
            'phone': self.phone,
            'alert_levels': sorted(level.slug for level in self.alert_levels),
            'active': self.active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class AlertMessage:
    title: str
    body: str
    aqi: Optional[int]
    category: Optional[Category]
    health_message: str
    recommendations: Tuple[str, ...]
    location: Tuple[float, float]
    timestamp: datetime
    html: str = ''


@dataclass(frozen=True)
class DispatchRequest:
    """One message for one channel of one subscription."""
    subscription_id: str
    channel: str
    contact: str
    message: AlertMessage

    @property
    def category(self) -> Optional[Category]:
        return self.message.category

    @property
    def overall_index(self) -> Optional[int]:
        return self.message.aqi


@dataclass(frozen=True)
class Receipt:
    channel: str
    contact: str
    message_id: str
    extra: Dict = field(default_factory=dict)
