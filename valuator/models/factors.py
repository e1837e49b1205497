"""
Individual pricing rules of the factor model.

Each rule maps one aspect of the property to either a multiplier (around 1.0)
or an additive adjustment (around 0.0, applied as ``1 + adjustment``).
Missing inputs resolve to the neutral value.
"""

from typing import Iterable, Optional

from ..core.utils import normalize_tag, unwrap_or
from . import tables
from .base import (
    Condition,
    NaturalLighting,
    NeighborhoodStatistics,
    NoiseLevel,
    Orientation,
    PropertyDescriptor,
    PropertyType,
)

# Walk-up penalty only bottoms out past the 30th floor, keeping the multiplier positive
MIN_FLOOR_ADJUSTMENT = -0.99
DEFAULT_MID_FLOOR = 4


def base_price_per_sqm(city: str) -> float:
    return tables.CITY_BASE_PRICES.get(city, tables.CITY_BASE_PRICES[tables.DEFAULT_CITY])


def location_factor(base_price: float, stats: Optional[NeighborhoodStatistics]) -> float:
    """Neighborhood average relative to the city base; 1.0 without data."""
    average = stats.avg_price_per_sqm if stats and stats.avg_price_per_sqm else None
    return unwrap_or(average, base_price) / base_price


def effective_area(
    covered_area: float,
    total_area: Optional[float] = None,
    semi_covered_area: Optional[float] = None,
) -> float:
    """Covered area plus discounted semi-covered and open space."""
    semi = unwrap_or(semi_covered_area, 0.0)
    total = unwrap_or(total_area, covered_area)
    uncovered = max(0.0, total - covered_area - semi)
    return covered_area + semi * tables.SEMI_COVERED_WEIGHT + uncovered * tables.UNCOVERED_WEIGHT


def property_type_factor(property_type: PropertyType) -> float:
    return tables.PROPERTY_TYPE_FACTORS[property_type]


def condition_factor(condition: Condition) -> float:
    return tables.CONDITION_FACTORS[condition]


def layout_efficiency(rooms: int, bedrooms: int) -> float:
    """Small units are easier to sell; big units with few bedrooms waste space."""
    if rooms <= 2:
        return 1.05
    if rooms == 3:
        return 1.0
    if rooms == 4:
        return 0.97
    bedroom_ratio = bedrooms / rooms
    if bedroom_ratio > 0.6:
        return 0.95
    return 0.94


def floor_adjustment(
    floor_number: Optional[int],
    total_floors: Optional[int],
    has_elevator: bool,
) -> float:
    # Ground floor or unknown: no information either way
    floor = unwrap_or(floor_number, 0)
    if floor <= 0:
        return 0.0

    if not has_elevator and floor > 2:
        return max(MIN_FLOOR_ADJUSTMENT, -0.15 - (floor - 2) * 0.03)

    if floor == 1:
        return -0.03

    if total_floors and floor == total_floors:
        return 0.03 if has_elevator else -0.05

    mid_floor = total_floors // 2 if total_floors else DEFAULT_MID_FLOOR
    distance = abs(floor - mid_floor)
    return max(-0.05, 0.04 - distance * 0.01)


def orientation_bonus(orientation: Optional[Orientation]) -> float:
    return unwrap_or(tables.ORIENTATION_BONUSES.get(orientation), 0.0)


def amenities_score(amenities: Iterable[str]) -> float:
    score = sum(unwrap_or(tables.AMENITY_VALUES.get(normalize_tag(a)), 0.0) for a in set(amenities))
    return min(score, tables.AMENITIES_CAP)


def age_depreciation(
    age: Optional[int],
    condition: Condition,
    renovation_year: Optional[int],
    current_year: int,
) -> float:
    if condition is Condition.NEW:
        return 0.0

    if renovation_year is not None and current_year - renovation_year <= tables.RECENT_RENOVATION_YEARS:
        return tables.RECENT_RENOVATION_BONUS

    assumed_age, rate = tables.AGE_ASSUMPTIONS[condition]
    years = unwrap_or(age, assumed_age)
    return -min(years * rate, tables.MAX_AGE_DEPRECIATION)


def parking_value(parking_spaces: int, stats: Optional[NeighborhoodStatistics]) -> float:
    """Parking is worth more where public transport is poor."""
    if parking_spaces <= 0:
        return 0.0
    # Unknown transport counts as none at all: full demand
    transport = unwrap_or(stats.transport_score if stats else None, 0.0)
    demand = (10 - transport) / 10
    return tables.PARKING_SPACE_VALUE * parking_spaces * demand


def quality_adjustments(
    natural_lighting: Optional[NaturalLighting],
    noise_level: Optional[NoiseLevel],
    view_quality: Optional[str],
) -> float:
    return (
        unwrap_or(tables.LIGHTING_ADJUSTMENTS.get(natural_lighting), 0.0)
        + unwrap_or(tables.NOISE_ADJUSTMENTS.get(noise_level), 0.0)
        + unwrap_or(tables.VIEW_ADJUSTMENTS.get(normalize_tag(view_quality)), 0.0)
    )


def confidence_score(descriptor: PropertyDescriptor, stats: Optional[NeighborhoodStatistics]) -> int:
    """50 points baseline plus a bonus for each corroborating input."""
    bonuses = tables.CONFIDENCE_BONUSES
    signals = {
        "neighborhood_price": bool(stats and stats.avg_price_per_sqm),
        "neighborhood": bool(descriptor.neighborhood),
        "floor_number": descriptor.floor_number is not None,
        "orientation": descriptor.orientation is not None,
        "amenities": bool(descriptor.amenities),
        "age": descriptor.building_age is not None or descriptor.year_built is not None,
        "natural_lighting": descriptor.natural_lighting is not None,
        "view_quality": bool(descriptor.view_quality),
    }
    score = tables.CONFIDENCE_BASE + sum(bonuses[name] for name, present in signals.items() if present)
    return max(0, min(score, tables.CONFIDENCE_MAX))
