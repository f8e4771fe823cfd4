"""
Tests for the index calculator.

Tests cover:
- Boundary value analysis: every tabulated breakpoint, both sides
- Clamping above the top breakpoint
- Monotonicity of every pollutant's sub-index
- Aggregation: overall index, dominant pollutant and tie-breaks
- Category table, including exact boundaries
"""
from datetime import datetime, timezone

import pytest

from apps.aqi.calculator import (
    calculate_index,
    calculate_sub_index,
    calculate_sub_indices,
    select_dominant,
)
from apps.aqi.types import Category, IndexResult, Pollutant, PollutantConcentration
from apps.core.constants import AQI_BREAKPOINTS, CONCENTRATION_BREAKPOINTS


class TestSubIndex:
    """Per-pollutant interpolation."""

    @pytest.mark.parametrize('pollutant', list(Pollutant))
    def test_upper_breakpoint_belongs_to_its_band(self, pollutant):
        """A concentration equal to a band's upper bound yields that band's top index."""
        for i, c_high in enumerate(CONCENTRATION_BREAKPOINTS[pollutant.value]):
            assert calculate_sub_index(pollutant, c_high) == AQI_BREAKPOINTS[i + 1] - 1

    def test_pm25_example(self):
        assert calculate_sub_index(Pollutant.PM25, 35.4) == 100

    def test_pm25_lowest_band_top(self):
        assert calculate_sub_index(Pollutant.PM25, 12) == 50

    def test_just_above_breakpoint_enters_next_band(self):
        assert calculate_sub_index(Pollutant.PM25, 12.1) == 51
        assert calculate_sub_index(Pollutant.PM10, 54.5) == 51

    def test_interpolates_inside_band(self):
        # (200 - 151) / (150.4 - 55.4) * (100 - 55.4) + 151 = 174.0
        assert calculate_sub_index(Pollutant.PM25, 100) == 174

    @pytest.mark.parametrize('pollutant', list(Pollutant))
    def test_above_top_breakpoint_clamps_to_500(self, pollutant):
        top = CONCENTRATION_BREAKPOINTS[pollutant.value][-1]
        assert calculate_sub_index(pollutant, top) == 500
        assert calculate_sub_index(pollutant, top + 0.1) == 500
        assert calculate_sub_index(pollutant, top * 10) == 500

    @pytest.mark.parametrize('pollutant', list(Pollutant))
    def test_missing_or_zero_scores_zero(self, pollutant):
        assert calculate_sub_index(pollutant, None) == 0
        assert calculate_sub_index(pollutant, 0) == 0
        assert calculate_sub_index(pollutant, 0.0) == 0

    @pytest.mark.parametrize('pollutant', list(Pollutant))
    def test_monotonic_non_decreasing(self, pollutant):
        top = CONCENTRATION_BREAKPOINTS[pollutant.value][-1]
        steps = 2000
        previous = 0
        for n in range(steps + 1):
            concentration = top * 1.2 * n / steps
            value = calculate_sub_index(pollutant, concentration)
            assert value >= previous, f"{pollutant.label} decreased at {concentration}"
            assert 0 <= value <= 500
            previous = value


class TestAggregation:
    """Overall index, dominant pollutant and result contents."""

    def test_all_absent_is_zero_and_good(self):
        result = calculate_index({})
        assert result.overall_index == 0
        assert result.category is Category.GOOD
        assert result.dominant_pollutant is Pollutant.PM25
        assert set(result.sub_indices) == set(Pollutant)
        assert all(value == 0 for value in result.sub_indices.values())

    def test_none_input_is_zero(self):
        assert calculate_index(None).overall_index == 0

    def test_overall_is_max_of_sub_indices(self):
        concentrations = {'pm25': 20, 'pm10': 200, 'ozone': 60, 'no2': 10, 'so2': 5, 'co': 1}
        result = calculate_index(concentrations)
        assert result.overall_index == max(result.sub_indices.values())
        assert result.dominant_pollutant is Pollutant.PM10
        assert result.sub_indices[Pollutant.PM10] == result.overall_index

    def test_zero_never_wins_against_a_reading(self):
        result = calculate_index({'pm25': None, 'co': 0.5})
        assert result.dominant_pollutant is Pollutant.CO
        assert result.overall_index == calculate_sub_index(Pollutant.CO, 0.5)

    def test_tie_goes_to_priority_order(self):
        # pm25=12 and pm10=54 both score 50
        result = calculate_index({'pm10': 54, 'pm25': 12})
        assert result.overall_index == 50
        assert result.dominant_pollutant is Pollutant.PM25

        # ozone=54 and no2=53 both score 50
        result = calculate_index({'no2': 53, 'ozone': 54})
        assert result.dominant_pollutant is Pollutant.OZONE

    def test_accepts_display_names_and_enum_keys(self):
        by_code = calculate_sub_indices({'pm25': 35.4, 'ozone': 70})
        by_label = calculate_sub_indices({'PM2.5': 35.4, 'Ozone': 70})
        by_enum = calculate_sub_indices({Pollutant.PM25: 35.4, Pollutant.OZONE: 70})
        assert by_code == by_label == by_enum

    def test_accepts_concentration_readings(self):
        readings = [
            PollutantConcentration(Pollutant.PM25, 35.4),
            PollutantConcentration(Pollutant.CO, 9.4, 'ppm'),
        ]
        result = calculate_index(readings)
        assert result.sub_indices[Pollutant.PM25] == 100
        assert result.sub_indices[Pollutant.CO] == 100
        assert result.dominant_pollutant is Pollutant.PM25

    def test_reading_defaults_unit(self):
        assert PollutantConcentration(Pollutant.CO, 1.0).unit == 'ppm'

    def test_unknown_pollutant_rejected(self):
        with pytest.raises(ValueError):
            calculate_index({'lead': 3})

    def test_select_dominant_with_partial_mapping(self):
        assert select_dominant({Pollutant.SO2: 80}) == (Pollutant.SO2, 80)

    def test_result_carries_category_content(self):
        result = calculate_index({'pm25': 100}, location_key=(40.0, -74.0))
        assert result.category is Category.UNHEALTHY
        assert result.health_message == Category.UNHEALTHY.health_message
        assert result.recommendations == Category.UNHEALTHY.recommendations
        assert result.location_key == (40.0, -74.0)

    def test_result_is_immutable(self):
        result = calculate_index({'pm25': 10})
        with pytest.raises(AttributeError):
            result.overall_index = 400

    def test_dict_round_trip(self):
        computed_at = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        result = calculate_index({'pm25': 60, 'no2': 120}, location_key=(1.5, 2.5), computed_at=computed_at)
        assert IndexResult.from_dict(result.to_dict()) == result


class TestCategory:
    """Classification table."""

    @pytest.mark.parametrize('aqi,expected', [
        (0, Category.GOOD),
        (50, Category.GOOD),
        (51, Category.MODERATE),
        (100, Category.MODERATE),
        (101, Category.UNHEALTHY_SENSITIVE),
        (150, Category.UNHEALTHY_SENSITIVE),
        (151, Category.UNHEALTHY),
        (200, Category.UNHEALTHY),
        (201, Category.VERY_UNHEALTHY),
        (300, Category.VERY_UNHEALTHY),
        (301, Category.HAZARDOUS),
        (500, Category.HAZARDOUS),
    ])
    def test_boundaries(self, aqi, expected):
        assert Category.for_index(aqi) is expected

    def test_every_index_has_exactly_one_category(self):
        for aqi in range(0, 501):
            matching = [c for c in Category if c.min_value <= aqi <= c.max_value]
            assert matching == [Category.for_index(aqi)]

    @pytest.mark.parametrize('name', ['very-unhealthy', 'Very Unhealthy', 'VERY_UNHEALTHY', ' very-unhealthy '])
    def test_parse_accepts_every_spelling(self, name):
        assert Category.parse(name) is Category.VERY_UNHEALTHY

    def test_parse_sensitive_groups_label(self):
        assert Category.parse('Unhealthy for Sensitive Groups') is Category.UNHEALTHY_SENSITIVE
        assert Category.parse('unhealthy-sensitive') is Category.UNHEALTHY_SENSITIVE

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Category.parse('smoky')

    def test_every_category_has_advice(self):
        for category in Category:
            assert category.health_message
            assert len(category.recommendations) >= 1
