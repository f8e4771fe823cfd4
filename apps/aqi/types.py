"""
Value types produced and consumed by the index calculator.
"""
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Tuple

from apps.core.constants import AQI_CATEGORIES, POLLUTANTS, POLLUTANT_PRIORITY


class Pollutant(enum.Enum):
    """The six pollutants the index is computed from, in tie-break order."""
    PM25 = 'pm25'
    PM10 = 'pm10'
    OZONE = 'ozone'
    NO2 = 'no2'
    SO2 = 'so2'
    CO = 'co'

    @property
    def label(self) -> str:
        return POLLUTANTS[self.value]['name']

    @property
    def unit(self) -> str:
        return POLLUTANTS[self.value]['unit']

    @property
    def priority(self) -> int:
        return POLLUTANT_PRIORITY.index(self.value)

    @classmethod
    def parse(cls, name) -> 'Pollutant':
        """
        Resolve a pollutant from its code ('pm25') or display name ('PM2.5').

        Raises:
            ValueError: for an unknown pollutant name
        """
        if isinstance(name, cls):
            return name
        normalized = str(name).strip().lower()
        for pollutant in cls:
            if normalized in (pollutant.value, pollutant.label.lower()):
                return pollutant
        raise ValueError(f"Unknown pollutant: {name}")


_CATEGORY_INFO = {entry['slug']: entry for entry in AQI_CATEGORIES}


class Category(enum.Enum):
    """
    Index category. The value is the canonical slug; label, range and
    advice come from the AQI_CATEGORIES table.
    """
    GOOD = 'good'
    MODERATE = 'moderate'
    UNHEALTHY_SENSITIVE = 'unhealthy-sensitive'
    UNHEALTHY = 'unhealthy'
    VERY_UNHEALTHY = 'very-unhealthy'
    HAZARDOUS = 'hazardous'

    @property
    def slug(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _CATEGORY_INFO[self.value]['label']

    @property
    def min_value(self) -> int:
        return _CATEGORY_INFO[self.value]['min_value']

    @property
    def max_value(self) -> int:
        return _CATEGORY_INFO[self.value]['max_value']

    @property
    def color_hex(self) -> str:
        return _CATEGORY_INFO[self.value]['color_hex']

    @property
    def health_message(self) -> str:
        return _CATEGORY_INFO[self.value]['health_message']

    @property
    def recommendations(self) -> Tuple[str, ...]:
        return tuple(_CATEGORY_INFO[self.value]['recommendations'])

    @classmethod
    def for_index(cls, aqi: int) -> 'Category':
        """Classify an overall index; values above the table land in Hazardous."""
        for category in cls:
            if category.min_value <= aqi <= category.max_value:
                return category
        if aqi < cls.GOOD.min_value:
            return cls.GOOD
        return cls.HAZARDOUS

    @classmethod
    def parse(cls, name) -> 'Category':
        """
        Resolve a category from its slug, enum name or display label.

        'very-unhealthy', 'VERY_UNHEALTHY' and 'Very Unhealthy' all map to
        Category.VERY_UNHEALTHY.

        Raises:
            ValueError: for an unknown category name
        """
        if isinstance(name, cls):
            return name
        text = str(name).strip()
        for category in cls:
            if text.lower() in (category.slug, category.label.lower()) or text.upper() == category.name:
                return category
        raise ValueError(f"Unknown category: {name}")


@dataclass(frozen=True)
class PollutantConcentration:
    pollutant: Pollutant
    value: float
    unit: str = ''

    def __post_init__(self):
        if not self.unit:
            object.__setattr__(self, 'unit', self.pollutant.unit)


@dataclass(frozen=True)
class IndexResult:
    """
    A classified index for one location. Immutable once computed.

    overall_index is always the maximum of sub_indices, and category is
    derived from overall_index alone.
    """
    location_key: Tuple[float, float]
    computed_at: datetime
    overall_index: int
    dominant_pollutant: Pollutant
    category: Category
    health_message: str
    recommendations: Tuple[str, ...]
    sub_indices: Dict[Pollutant, int] = field(default_factory=dict)

    @property
    def lat(self) -> float:
        return self.location_key[0]

    @property
    def lng(self) -> float:
        return self.location_key[1]

    def to_dict(self) -> Dict:
        """Serialize to a JSON-safe dict (the form stored in the cache)."""
        return {
            'location': {'lat': self.lat, 'lng': self.lng},
            'computed_at': self.computed_at.isoformat(),
            'aqi': self.overall_index,
            'dominant_pollutant': self.dominant_pollutant.value,
            'category': self.category.slug,
            'category_label': self.category.label,
            'health_message': self.health_message,
            'recommendations': list(self.recommendations),
            'sub_indices': {p.value: v for p, v in self.sub_indices.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'IndexResult':
        return cls(
            location_key=(data['location']['lat'], data['location']['lng']),
            computed_at=datetime.fromisoformat(data['computed_at']),
            overall_index=data['aqi'],
            dominant_pollutant=Pollutant(data['dominant_pollutant']),
            category=Category(data['category']),
            health_message=data['health_message'],
            recommendations=tuple(data['recommendations']),
            sub_indices={Pollutant(p): v for p, v in data['sub_indices'].items()},
        )
