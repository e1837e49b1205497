"""
Tests for the individual pricing rules of the factor model.
"""

import pytest

from valuator.models import factors, tables
from valuator.models.base import (
    Condition,
    NaturalLighting,
    NeighborhoodStatistics,
    NoiseLevel,
    Orientation,
    PropertyType,
)


class TestReferenceTables:

    def test_known_city_base_price(self):
        assert factors.base_price_per_sqm("Buenos Aires") == 2600
        assert factors.base_price_per_sqm("Córdoba") == 1800

    def test_unknown_city_uses_default(self):
        assert factors.base_price_per_sqm("Ushuaia") == 1500

    @pytest.mark.parametrize("property_type,expected", [
        (PropertyType.APARTMENT, 1.0),
        (PropertyType.PH, 0.95),
        (PropertyType.HOUSE, 0.9),
        (PropertyType.LAND, 0.4),
    ])
    def test_property_type_factor(self, property_type, expected):
        assert factors.property_type_factor(property_type) == expected

    def test_condition_factors_strictly_increase(self):
        ordered = [Condition.TO_RENOVATE, Condition.FAIR, Condition.GOOD, Condition.EXCELLENT, Condition.NEW]
        values = [factors.condition_factor(c) for c in ordered]
        assert values == sorted(values)
        assert len(set(values)) == len(values)


class TestLocationFactor:

    def test_neutral_without_stats(self):
        assert factors.location_factor(2600, None) == 1.0

    def test_neutral_when_average_unknown(self):
        assert factors.location_factor(2600, NeighborhoodStatistics(transport_score=5)) == 1.0

    def test_ratio_to_city_base(self):
        stats = NeighborhoodStatistics(avg_price_per_sqm=3250)
        assert factors.location_factor(2600, stats) == pytest.approx(1.25)


class TestEffectiveArea:

    def test_covered_only(self):
        assert factors.effective_area(100) == 100

    def test_semi_covered_and_open_space_are_discounted(self):
        # 100 covered + 20 semi (x0.5) + 30 open (x0.35)
        assert factors.effective_area(100, 150, 20) == pytest.approx(120.5)

    def test_total_smaller_than_covered_adds_nothing(self):
        assert factors.effective_area(100, 90, None) == 100

    def test_semi_covered_without_total(self):
        assert factors.effective_area(80, None, 10) == pytest.approx(85)


class TestLayoutEfficiency:

    @pytest.mark.parametrize("rooms,bedrooms,expected", [
        (1, 0, 1.05),
        (2, 1, 1.05),
        (3, 2, 1.0),
        (4, 3, 0.97),
        (5, 4, 0.95),
        (5, 3, 0.94),   # ratio exactly 0.6 is not above it
        (6, 2, 0.94),
    ])
    def test_layout(self, rooms, bedrooms, expected):
        assert factors.layout_efficiency(rooms, bedrooms) == expected


class TestFloorAdjustment:

    def test_unknown_floor_is_neutral(self):
        assert factors.floor_adjustment(None, 10, True) == 0

    def test_ground_floor_is_neutral(self):
        assert factors.floor_adjustment(0, 10, False) == 0

    def test_walk_up_penalty(self):
        assert factors.floor_adjustment(5, 6, False) == pytest.approx(-0.24)

    def test_walk_up_penalty_follows_formula_on_high_floors(self):
        # -0.15 - 0.03 x (20 - 2)
        assert factors.floor_adjustment(20, 25, False) == pytest.approx(-0.69)
        assert factors.floor_adjustment(30, 31, False) == pytest.approx(-0.99)

    def test_walk_up_penalty_keeps_multiplier_positive(self):
        assert factors.floor_adjustment(40, 45, False) == factors.MIN_FLOOR_ADJUSTMENT
        assert 1 + factors.MIN_FLOOR_ADJUSTMENT > 0

    def test_first_floor(self):
        assert factors.floor_adjustment(1, 10, True) == pytest.approx(-0.03)
        assert factors.floor_adjustment(1, 10, False) == pytest.approx(-0.03)

    def test_top_floor_with_elevator(self):
        assert factors.floor_adjustment(10, 10, True) == pytest.approx(0.03)

    def test_top_floor_without_elevator(self):
        assert factors.floor_adjustment(2, 2, False) == pytest.approx(-0.05)

    def test_middle_floor_best(self):
        assert factors.floor_adjustment(5, 10, True) == pytest.approx(0.04)

    def test_default_middle_floor_when_height_unknown(self):
        assert factors.floor_adjustment(4, None, True) == pytest.approx(0.04)
        assert factors.floor_adjustment(6, None, True) == pytest.approx(0.02)

    def test_distance_from_middle_bottoms_out(self):
        assert factors.floor_adjustment(15, None, True) == pytest.approx(-0.05)


class TestOrientation:

    @pytest.mark.parametrize("orientation,expected", [
        (Orientation.NORTH, 0.05),
        (Orientation.NORTHEAST, 0.03),
        (Orientation.NORTHWEST, 0.03),
        (Orientation.EAST, 0.01),
        (Orientation.WEST, 0.01),
        (Orientation.SOUTHEAST, 0.0),
        (Orientation.SOUTHWEST, -0.01),
        (Orientation.SOUTH, -0.02),
        (None, 0.0),
    ])
    def test_bonus(self, orientation, expected):
        assert factors.orientation_bonus(orientation) == expected

    def test_parsing_is_case_insensitive(self):
        assert Orientation.from_string(" North ") is Orientation.NORTH
        assert Orientation.from_string("up") is None
        assert Orientation.from_string("") is None


class TestAmenities:

    def test_sum_of_known_amenities(self):
        assert factors.amenities_score({"pool", "garden"}) == pytest.approx(0.10)

    def test_unknown_amenities_worth_nothing(self):
        assert factors.amenities_score({"sauna", "rooftop_bar"}) == 0

    def test_capped(self):
        everything = {"pool", "gym", "security", "laundry", "balcony", "terrace",
                      "garden", "elevator", "ac", "heating", "storage"}
        assert factors.amenities_score(everything) == pytest.approx(0.20)

    def test_tags_are_normalized(self):
        assert factors.amenities_score(["Pool", "GYM "]) == pytest.approx(0.08)


class TestAgeDepreciation:

    def test_new_property_has_none(self):
        assert factors.age_depreciation(50, Condition.NEW, None, 2024) == 0

    def test_recent_renovation_overrides_age(self):
        assert factors.age_depreciation(60, Condition.FAIR, 2020, 2024) == pytest.approx(0.08)

    def test_old_renovation_ignored(self):
        assert factors.age_depreciation(10, Condition.GOOD, 2010, 2024) == pytest.approx(-0.08)

    @pytest.mark.parametrize("condition,expected", [
        (Condition.EXCELLENT, -0.025),   # 5y x 0.005
        (Condition.GOOD, -0.08),         # 10y x 0.008
        (Condition.FAIR, -0.24),         # 20y x 0.012
        (Condition.TO_RENOVATE, -0.30),  # 30y x 0.015, capped
    ])
    def test_assumed_age_from_condition(self, condition, expected):
        assert factors.age_depreciation(None, condition, None, 2024) == pytest.approx(expected)

    def test_depreciation_capped(self):
        assert factors.age_depreciation(80, Condition.GOOD, None, 2024) == pytest.approx(-0.30)


class TestParkingValue:

    def test_no_parking(self):
        assert factors.parking_value(0, None) == 0

    def test_full_value_without_transport_data(self):
        assert factors.parking_value(2, None) == pytest.approx(0.16)

    def test_good_transport_lowers_value(self):
        stats = NeighborhoodStatistics(transport_score=8)
        assert factors.parking_value(1, stats) == pytest.approx(0.016)

    def test_no_transport_keeps_full_value(self):
        stats = NeighborhoodStatistics(transport_score=0)
        assert factors.parking_value(1, stats) == pytest.approx(0.08)


class TestQualityAdjustments:

    def test_unset_is_neutral(self):
        assert factors.quality_adjustments(None, None, None) == 0

    def test_all_positive(self):
        result = factors.quality_adjustments(NaturalLighting.EXCELLENT, NoiseLevel.QUIET, "Park")
        assert result == pytest.approx(0.10)

    def test_all_negative(self):
        result = factors.quality_adjustments(NaturalLighting.POOR, NoiseLevel.NOISY, "poor")
        assert result == pytest.approx(-0.10)

    def test_middling_values_are_neutral(self):
        assert factors.quality_adjustments(NaturalLighting.AVERAGE, NoiseLevel.MODERATE, "street") == 0

    def test_unknown_view_is_neutral(self):
        assert factors.quality_adjustments(None, None, "mountains") == 0

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            tables.VIEW_ADJUSTMENTS["mountains"] = 0.1


class TestConfidenceScore:

    def test_baseline(self, descriptor):
        assert factors.confidence_score(descriptor, None) == 50

    def test_every_signal(self, variant):
        d = variant(
            neighborhood="Palermo",
            floor_number=3,
            orientation=Orientation.NORTH,
            amenities=frozenset({"pool"}),
            building_age=12,
            natural_lighting=NaturalLighting.GOOD,
            view_quality="city",
        )
        stats = NeighborhoodStatistics(avg_price_per_sqm=3000)
        assert factors.confidence_score(d, stats) == 100

    def test_ground_floor_still_counts_as_known(self, variant):
        assert factors.confidence_score(variant(floor_number=0), None) == 55
