"""
Index calculator: pollutant concentrations -> sub-indices -> classified index.

Pure functions only. Inputs are assumed validated (non-negative, finite);
see apps.core.utils.validate_concentrations.
"""
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from django.utils import timezone

from apps.core.constants import AQI_BREAKPOINTS, AQI_MAX, CONCENTRATION_BREAKPOINTS
from apps.core.utils import round_half_away
from .types import Category, IndexResult, Pollutant, PollutantConcentration

Concentrations = Union[Mapping, Iterable[PollutantConcentration]]


def calculate_sub_index(pollutant: Pollutant, concentration: Optional[float]) -> int:
    """
    Calculate the sub-index for one pollutant via piecewise linear interpolation.

    A concentration equal to a band's upper breakpoint belongs to that band
    and yields the band's upper index bound. Concentrations above the top
    breakpoint are clamped to 500.

    Args:
        pollutant: Pollutant being scored
        concentration: Concentration value, or None when the reading is missing

    Returns:
        int sub-index in [0, 500]
    """
    if not concentration:
        return 0

    thresholds = CONCENTRATION_BREAKPOINTS[pollutant.value]

    for i, c_high in enumerate(thresholds):
        if concentration <= c_high:
            c_low = thresholds[i - 1] if i > 0 else 0
            aqi_low = AQI_BREAKPOINTS[i]
            aqi_high = AQI_BREAKPOINTS[i + 1] - 1

            aqi = (aqi_high - aqi_low) / (c_high - c_low) * (concentration - c_low) + aqi_low
            return min(round_half_away(aqi), AQI_MAX)

    return AQI_MAX


def normalize_concentrations(concentrations: Optional[Concentrations]) -> Dict[Pollutant, Optional[float]]:
    """
    Turn any accepted input shape into a full Pollutant -> value mapping.

    Accepts a mapping keyed by Pollutant, code ('pm25') or display name
    ('PM2.5'), or an iterable of PollutantConcentration. Pollutants that are
    not supplied map to None.

    Raises:
        ValueError: for an unknown pollutant name; callers validate input
            with apps.core.utils.validate_concentrations first
    """
    normalized = {pollutant: None for pollutant in Pollutant}
    if not concentrations:
        return normalized

    if isinstance(concentrations, Mapping):
        items = concentrations.items()
    else:
        items = ((reading.pollutant, reading.value) for reading in concentrations)

    for name, value in items:
        normalized[Pollutant.parse(name)] = value
    return normalized


def calculate_sub_indices(concentrations: Optional[Concentrations]) -> Dict[Pollutant, int]:
    """Sub-index for every pollutant; absent readings score 0."""
    return {
        pollutant: calculate_sub_index(pollutant, value)
        for pollutant, value in normalize_concentrations(concentrations).items()
    }


def select_dominant(sub_indices: Mapping[Pollutant, int]) -> Tuple[Pollutant, int]:
    """
    Pick the pollutant with the highest sub-index.

    Ties go to the pollutant earliest in priority order
    (PM2.5, PM10, Ozone, NO2, SO2, CO).
    """
    ordered = sorted(Pollutant, key=lambda p: p.priority)
    dominant = max(ordered, key=lambda p: sub_indices.get(p, 0))
    return dominant, sub_indices.get(dominant, 0)


def calculate_index(
    concentrations: Optional[Concentrations],
    location_key: Tuple[float, float] = (0.0, 0.0),
    computed_at=None,
) -> IndexResult:
    """
    Compute the classified index for one set of concentrations.

    Args:
        concentrations: Pollutant readings (mapping or PollutantConcentration list)
        location_key: Rounded (lat, lng) the result belongs to
        computed_at: Timestamp to stamp on the result (defaults to now)

    Returns:
        IndexResult
    """
    sub_indices = calculate_sub_indices(concentrations)
    dominant, overall = select_dominant(sub_indices)
    category = Category.for_index(overall)

    return IndexResult(
        location_key=tuple(location_key),
        computed_at=computed_at or timezone.now(),
        overall_index=overall,
        dominant_pollutant=dominant,
        category=category,
        health_message=category.health_message,
        recommendations=category.recommendations,
        sub_indices=sub_indices,
    )
