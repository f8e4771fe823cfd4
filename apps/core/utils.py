"""
Utility functions for the air quality core.
"""
import math
from decimal import Decimal, ROUND_HALF_UP

from apps.aqi.types import Pollutant

from .exceptions import InvalidInput


def round_half_away(value):
    """
    Round to the nearest integer, halves away from zero.

    Python's round() uses banker's rounding, which would turn 50.5 into 50.
    """
    quantized = Decimal(repr(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return int(quantized)


def round_coordinate(value, precision=4):
    """Round a coordinate through Decimal so cache keys are stable."""
    return float(round(Decimal(str(value)), precision))


def location_key(lat, lng, precision=4):
    """
    Build the (lat, lng) key a result is stored and matched under.

    Args:
        lat: latitude
        lng: longitude
        precision: decimal places kept

    Returns:
        tuple: (rounded lat, rounded lng)
    """
    return round_coordinate(lat, precision), round_coordinate(lng, precision)


def within_tolerance(lat1, lng1, lat2, lng2, tolerance):
    """True when both coordinate deltas are strictly below tolerance degrees."""
    return abs(lat1 - lat2) < tolerance and abs(lng1 - lng2) < tolerance


def validate_coordinates(lat, lng):
    """
    Validate latitude and longitude values.

    Args:
        lat: latitude value
        lng: longitude value

    Returns:
        tuple: (lat, lng) as floats

    Raises:
        InvalidInput: when either value is missing, non-numeric or out of range
    """
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid coordinate format")

    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidInput("Invalid coordinate format")

    if not (-90 <= lat <= 90):
        raise InvalidInput("Latitude must be between -90 and 90")

    if not (-180 <= lng <= 180):
        raise InvalidInput("Longitude must be between -180 and 180")

    return lat, lng


def validate_concentrations(concentrations):
    """
    Validate a pollutant -> concentration mapping before it reaches the calculator.

    Keys are resolved to pollutant codes. None values are kept (a missing
    reading is legal); anything else must be a finite, non-negative number.

    Raises:
        InvalidInput: on an unknown pollutant, or a negative, non-finite or
            non-numeric concentration
    """
    validated = {}
    for name, value in (concentrations or {}).items():
        try:
            pollutant = Pollutant.parse(name).value
        except ValueError:
            raise InvalidInput(f"Unknown pollutant: {name}")
        if value is None:
            validated[pollutant] = None
            continue
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidInput(f"Concentration for {pollutant} must be a number")
        if not math.isfinite(value):
            raise InvalidInput(f"Concentration for {pollutant} must be finite")
        if value < 0:
            raise InvalidInput(f"Concentration for {pollutant} cannot be negative")
        validated[pollutant] = value
    return validated
