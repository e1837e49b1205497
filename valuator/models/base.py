from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Protocol

from ..core.errors import InvalidPropertyError
from ..core.utils import normalize_tag


class _TagEnum(str, Enum):
    """String-valued enum that parses loosely formatted tags."""

    @classmethod
    def from_string(cls, value: Optional[str]):
        """Case/whitespace-insensitive lookup; None for unknown or blank tags."""
        tag = normalize_tag(value)
        if tag is None:
            return None
        for member in cls:
            if member.value == tag:
                return member
        return None


class PropertyType(_TagEnum):
    APARTMENT = "apartment"
    HOUSE = "house"
    PH = "ph"
    LAND = "land"


class Condition(_TagEnum):
    NEW = "new"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    TO_RENOVATE = "to_renovate"


class Orientation(_TagEnum):
    NORTH = "north"
    NORTHEAST = "northeast"
    EAST = "east"
    SOUTHEAST = "southeast"
    SOUTH = "south"
    SOUTHWEST = "southwest"
    WEST = "west"
    NORTHWEST = "northwest"


class NaturalLighting(_TagEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class NoiseLevel(_TagEnum):
    QUIET = "quiet"
    MODERATE = "moderate"
    NOISY = "noisy"


class PriceIndicator(_TagEnum):
    OVERPRICED = "overpriced"
    MARKET = "market"
    OPPORTUNITY = "opportunity"


class Impact(_TagEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


# ----- Inputs -----

@dataclass(frozen=True)
class PropertyDescriptor:
    """
    Everything the valuation looks at. Only ``covered_area`` is mandatory;
    every other attribute may be left unset and then has no effect on price.
    """
    city: str
    property_type: PropertyType
    condition: Condition
    covered_area: float
    province: str = ""
    neighborhood: Optional[str] = None
    total_area: Optional[float] = None
    semi_covered_area: Optional[float] = None
    rooms: int = 0
    bedrooms: int = 0
    bathrooms: int = 0
    floor_number: Optional[int] = None
    total_floors: Optional[int] = None
    has_elevator: bool = False
    orientation: Optional[Orientation] = None
    amenities: FrozenSet[str] = frozenset()
    building_age: Optional[int] = None
    year_built: Optional[int] = None
    renovation_year: Optional[int] = None
    natural_lighting: Optional[NaturalLighting] = None
    noise_level: Optional[NoiseLevel] = None
    view_quality: Optional[str] = None
    monthly_expenses: Optional[float] = None
    parking_spaces: int = 0
    building_type: Optional[str] = None
    property_layout: Optional[str] = None
    asked_price: Optional[float] = None

    def __post_init__(self):
        # Accept any iterable of tags; store a normalized, duplicate-free set.
        tags = frozenset(t for t in (normalize_tag(a) for a in self.amenities) if t)
        object.__setattr__(self, "amenities", tags)

    def validate(self) -> None:
        # `not x > 0` also rejects NaN
        if self.covered_area is None or not self.covered_area > 0:
            raise InvalidPropertyError(
                f"covered_area must be a positive number, got {self.covered_area!r}",
                field="covered_area",
            )


@dataclass(frozen=True)
class NeighborhoodStatistics:
    """Pre-aggregated market data for a city/neighborhood pair."""
    avg_price_per_sqm: Optional[float] = None
    avg_days_on_market: Optional[int] = None
    transport_score: Optional[float] = None  # 0..10


# ----- Outputs -----

@dataclass(frozen=True)
class AppliedFactor:
    name: str
    value: float
    impact: Impact


@dataclass(frozen=True)
class ValuationBreakdown:
    base_price_per_sqm: float
    effective_area: float
    location_factor: float
    property_type_factor: float
    condition_factor: float
    floor_adjustment: float
    orientation_bonus: float
    parking_value: float
    amenities_score: float
    age_depreciation: float
    layout_efficiency: float
    quality_adjustments: float
    final_price_per_sqm: float
    factors_applied: List[AppliedFactor] = field(default_factory=list)


@dataclass(frozen=True)
class ValuationResult:
    estimated_min: int
    estimated_max: int
    suggested_price: int
    price_per_sqm: int
    estimated_sale_days: int
    confidence_score: int
    breakdown: ValuationBreakdown
    price_indicator: Optional[PriceIndicator] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-able data; enums collapse to their values."""
        data = asdict(self)
        data["price_indicator"] = self.price_indicator.value if self.price_indicator else None
        for item in data["breakdown"]["factors_applied"]:
            item["impact"] = item["impact"].value
        return data


class ValuationModel(Protocol):
    def estimate(
        self,
        descriptor: PropertyDescriptor,
        stats: Optional[NeighborhoodStatistics] = None,
    ) -> ValuationResult:
        """Pure: identical inputs give identical results."""
        ...
