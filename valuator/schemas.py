from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .data.base import ComparableSearchParams
from .models.base import (
    Condition,
    NaturalLighting,
    NoiseLevel,
    Orientation,
    PropertyDescriptor,
    PropertyType,
)

# ----- Requests -----

class PropertyIn(BaseModel):
    """
    Property attributes as entered in the value-report form. Geometry is
    validated by the valuation itself, so a bad covered_area yields a 422
    with the engine's message rather than a schema error.
    """
    city: str = Field(min_length=1)
    province: str = ""
    neighborhood: Optional[str] = None
    property_type: PropertyType
    condition: Condition = Condition.GOOD
    covered_area: float
    total_area: Optional[float] = Field(default=None, ge=0)
    semi_covered_area: Optional[float] = Field(default=None, ge=0)
    rooms: int = Field(default=0, ge=0)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    floor_number: Optional[int] = None
    total_floors: Optional[int] = Field(default=None, ge=0)
    has_elevator: bool = False
    orientation: Optional[str] = None
    amenities: list[str] = Field(default_factory=list)
    building_age: Optional[int] = Field(default=None, ge=0)
    year_built: Optional[int] = None
    renovation_year: Optional[int] = None
    natural_lighting: Optional[str] = None
    noise_level: Optional[str] = None
    view_quality: Optional[str] = None
    monthly_expenses: Optional[float] = Field(default=None, ge=0)
    parking_spaces: int = Field(default=0, ge=0)
    building_type: Optional[str] = None
    property_layout: Optional[str] = None
    asked_price: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _consistent_geometry(self):
        if self.floor_number is not None and self.total_floors is not None \
                and self.total_floors < self.floor_number:
            raise ValueError("total_floors must be at least floor_number")
        if self.total_area is not None and self.total_area < self.covered_area:
            raise ValueError("total_area must be at least covered_area")
        return self

    def to_descriptor(self) -> PropertyDescriptor:
        # Unrecognized tags (e.g. "N/A" orientation) are treated as unknown
        return PropertyDescriptor(
            city=self.city.strip(),
            province=self.province,
            neighborhood=(self.neighborhood or "").strip() or None,
            property_type=self.property_type,
            condition=self.condition,
            covered_area=self.covered_area,
            total_area=self.total_area,
            semi_covered_area=self.semi_covered_area,
            rooms=self.rooms,
            bedrooms=self.bedrooms,
            bathrooms=self.bathrooms,
            floor_number=self.floor_number,
            total_floors=self.total_floors,
            has_elevator=self.has_elevator,
            orientation=Orientation.from_string(self.orientation),
            amenities=frozenset(self.amenities),
            building_age=self.building_age,
            year_built=self.year_built,
            renovation_year=self.renovation_year,
            natural_lighting=NaturalLighting.from_string(self.natural_lighting),
            noise_level=NoiseLevel.from_string(self.noise_level),
            view_quality=self.view_quality,
            monthly_expenses=self.monthly_expenses,
            parking_spaces=self.parking_spaces,
            building_type=self.building_type,
            property_layout=self.property_layout,
            asked_price=self.asked_price,
        )

class ValuationRequest(PropertyIn):
    report_type: Literal["seller", "buyer"] = "seller"
    address: str = ""
    property_id: Optional[str] = None

class ComparablesRequest(BaseModel):
    city: str = Field(min_length=1)
    neighborhood: Optional[str] = None
    property_type: PropertyType
    covered_area: float
    rooms: int = Field(default=0, ge=0)
    exclude_property_id: Optional[str] = None

    def to_params(self) -> ComparableSearchParams:
        return ComparableSearchParams(
            city=self.city.strip(),
            neighborhood=(self.neighborhood or "").strip() or None,
            property_type=self.property_type,
            covered_area=self.covered_area,
            rooms=self.rooms,
            exclude_property_id=self.exclude_property_id,
        )

# ----- Responses -----

class Range(BaseModel):
    low: int
    high: int

class FactorOut(BaseModel):
    name: str
    value: float
    impact: Literal["positive", "negative", "neutral"]

class BreakdownOut(BaseModel):
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
    factors_applied: list[FactorOut]

class ComparableOut(BaseModel):
    id: str
    address: str
    price: float
    covered_area: float
    price_per_sqm: int
    days_on_market: int

class MarketSummary(BaseModel):
    count: int
    median_price_per_sqm: int
    avg_days_on_market: int
    min_price: float
    max_price: float

class ComparablesResponse(BaseModel):
    comparables: list[ComparableOut]
    is_synthetic: bool
    market: MarketSummary

class ValuationResponse(BaseModel):
    report_type: Literal["seller", "buyer"]
    address: str
    city: str
    neighborhood: Optional[str] = None
    province: str = ""
    property_type: PropertyType
    property_id: Optional[str] = None
    currency: str = "USD"
    suggested_price: int
    range: Range
    price_per_sqm: int
    estimated_sale_days: int
    confidence: int = Field(ge=0, le=100)
    price_indicator: Optional[Literal["overpriced", "market", "opportunity"]] = None
    breakdown: BreakdownOut
    comparables: list[ComparableOut]
    comparables_synthetic: bool
    market: MarketSummary
    disclaimer: str
    cached: bool = False
    etag: str | None = None
