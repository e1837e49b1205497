"""
Reference data for the factor model.

All tables are read-only mappings built once at import; enum-keyed tables
cover every member of their enum (checked below at import time).
"""

from types import MappingProxyType
from typing import Mapping

from .base import Condition, NaturalLighting, NoiseLevel, Orientation, PropertyType

DEFAULT_CITY = "default"

# USD per m² of covered area for an average unit in each city
CITY_BASE_PRICES: Mapping[str, float] = MappingProxyType({
    "Buenos Aires": 2600,
    "Córdoba": 1800,
    "Rosario": 1700,
    "Mendoza": 1600,
    DEFAULT_CITY: 1500,
})

PROPERTY_TYPE_FACTORS: Mapping[PropertyType, float] = MappingProxyType({
    PropertyType.APARTMENT: 1.0,
    PropertyType.PH: 0.95,
    PropertyType.HOUSE: 0.9,
    PropertyType.LAND: 0.4,
})

CONDITION_FACTORS: Mapping[Condition, float] = MappingProxyType({
    Condition.NEW: 1.25,
    Condition.EXCELLENT: 1.12,
    Condition.GOOD: 1.0,
    Condition.FAIR: 0.88,
    Condition.TO_RENOVATE: 0.7,
})

ORIENTATION_BONUSES: Mapping[Orientation, float] = MappingProxyType({
    Orientation.NORTH: 0.05,
    Orientation.NORTHEAST: 0.03,
    Orientation.NORTHWEST: 0.03,
    Orientation.EAST: 0.01,
    Orientation.WEST: 0.01,
    Orientation.SOUTHEAST: 0.0,
    Orientation.SOUTHWEST: -0.01,
    Orientation.SOUTH: -0.02,
})

# Unknown amenity tags are worth nothing
AMENITY_VALUES: Mapping[str, float] = MappingProxyType({
    "pool": 0.05,
    "gym": 0.03,
    "security": 0.04,
    "laundry": 0.01,
    "balcony": 0.02,
    "terrace": 0.04,
    "garden": 0.05,
    "elevator": 0.02,
    "ac": 0.02,
    "heating": 0.015,
    "storage": 0.01,
})
AMENITIES_CAP = 0.20

# Age rules: (assumed age in years when unknown, yearly depreciation rate)
AGE_ASSUMPTIONS: Mapping[Condition, tuple] = MappingProxyType({
    Condition.NEW: (0, 0.0),
    Condition.EXCELLENT: (5, 0.005),
    Condition.GOOD: (10, 0.008),
    Condition.FAIR: (20, 0.012),
    Condition.TO_RENOVATE: (30, 0.015),
})
MAX_AGE_DEPRECIATION = 0.30
RECENT_RENOVATION_YEARS = 5
RECENT_RENOVATION_BONUS = 0.08

# Effective-area weights relative to covered area
SEMI_COVERED_WEIGHT = 0.5
UNCOVERED_WEIGHT = 0.35

PARKING_SPACE_VALUE = 0.08

# Perceived-quality adjustments; levels not listed are neutral
LIGHTING_ADJUSTMENTS: Mapping[NaturalLighting, float] = MappingProxyType({
    NaturalLighting.EXCELLENT: 0.03,
    NaturalLighting.POOR: -0.03,
})
NOISE_ADJUSTMENTS: Mapping[NoiseLevel, float] = MappingProxyType({
    NoiseLevel.NOISY: -0.05,
    NoiseLevel.QUIET: 0.02,
})
VIEW_ADJUSTMENTS: Mapping[str, float] = MappingProxyType({
    "excellent": 0.05,
    "city": 0.05,
    "park": 0.05,
    "poor": -0.02,
})

# Uncertainty band and time-to-sell, both driven by the liquidity score.
# Evaluated top-down: first threshold the score exceeds wins.
VARIANCE_BANDS = ((1.15, 0.12), (1.0, 0.15), (0.9, 0.18))
VARIANCE_FLOOR = 0.22
SALE_DAYS_BANDS = ((1.2, 30), (1.1, 45), (1.0, 60), (0.9, 90))
SALE_DAYS_FLOOR = 120

# Asked price further than this from the estimate is flagged
PRICE_INDICATOR_TOLERANCE = 0.10

CONFIDENCE_BASE = 50
CONFIDENCE_MAX = 100
CONFIDENCE_BONUSES: Mapping[str, int] = MappingProxyType({
    "neighborhood_price": 15,
    "neighborhood": 10,
    "floor_number": 5,
    "orientation": 5,
    "amenities": 5,
    "age": 5,
    "natural_lighting": 3,
    "view_quality": 2,
})


def _check_exhaustive(table: Mapping, enum_cls) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(f"{enum_cls.__name__} table is missing {sorted(m.value for m in missing)}")


for _table, _enum in (
    (PROPERTY_TYPE_FACTORS, PropertyType),
    (CONDITION_FACTORS, Condition),
    (ORIENTATION_BONUSES, Orientation),
    (AGE_ASSUMPTIONS, Condition),
):
    _check_exhaustive(_table, _enum)
