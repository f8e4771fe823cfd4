"""
Tests for shared rounding and validation helpers.
"""
import math

import pytest

from apps.core.exceptions import InvalidInput
from apps.core.utils import (
    location_key,
    round_half_away,
    validate_concentrations,
    validate_coordinates,
    within_tolerance,
)


class TestRounding:

    @pytest.mark.parametrize('value,expected', [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (50.5, 51),
        (50.49, 50),
        (173.999, 174),
        (0, 0),
    ])
    def test_round_half_away(self, value, expected):
        assert round_half_away(value) == expected

    def test_location_key(self):
        assert location_key(40.712776, -74.005974) == (40.7128, -74.006)
        assert location_key(40.712776, -74.005974, precision=2) == (40.71, -74.01)

    def test_within_tolerance_is_strict(self):
        assert within_tolerance(40.0, -74.0, 40.05, -74.05, 0.1)
        assert not within_tolerance(40.0, -74.0, 40.0, -74.5, 0.1)
        assert not within_tolerance(0.0, 0.0, 0.5, 0.0, 0.5)


class TestValidation:

    def test_valid_coordinates_become_floats(self):
        assert validate_coordinates('40.5', -74) == (40.5, -74.0)

    @pytest.mark.parametrize('lat,lng', [
        (90.01, 0),
        (0, -180.5),
        ('abc', 0),
        (0, None),
        (math.nan, 0),
        (0, math.inf),
    ])
    def test_invalid_coordinates(self, lat, lng):
        with pytest.raises(InvalidInput):
            validate_coordinates(lat, lng)

    def test_bounds_are_inclusive(self):
        assert validate_coordinates(90, 180) == (90.0, 180.0)
        assert validate_coordinates(-90, -180) == (-90.0, -180.0)

    def test_concentrations_keep_missing_readings(self):
        assert validate_concentrations({'pm25': '12.5', 'co': None}) == {'pm25': 12.5, 'co': None}
        assert validate_concentrations(None) == {}

    def test_concentration_keys_resolved_to_codes(self):
        assert validate_concentrations({'PM2.5': 35.4, 'Ozone': None}) == {'pm25': 35.4, 'ozone': None}

    def test_unknown_pollutant_rejected(self):
        with pytest.raises(InvalidInput):
            validate_concentrations({'lead': 3})

    @pytest.mark.parametrize('value', [-0.1, math.nan, math.inf, 'high', [1]])
    def test_invalid_concentrations(self, value):
        with pytest.raises(InvalidInput):
            validate_concentrations({'pm25': value})
