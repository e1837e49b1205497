from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from ..core.config import settings
from ..core.utils import round_half_up
from . import factors, tables
from .base import (
    AppliedFactor,
    Impact,
    NeighborhoodStatistics,
    PriceIndicator,
    PropertyDescriptor,
    ValuationBreakdown,
    ValuationModel,
    ValuationResult,
)

logger = logging.getLogger(__name__)


def _impact(value: float) -> Impact:
    if value > 0:
        return Impact.POSITIVE
    if value < 0:
        return Impact.NEGATIVE
    return Impact.NEUTRAL


def _pick_band(score: float, bands, floor_value):
    for threshold, value in bands:
        if score > threshold:
            return value
    return floor_value


def classify_asked_price(asked_price: float, suggested_price: float) -> PriceIndicator:
    """Overpriced/opportunity when the ask is more than 10% off the estimate."""
    diff = (asked_price - suggested_price) / suggested_price
    if diff > tables.PRICE_INDICATOR_TOLERANCE:
        return PriceIndicator.OVERPRICED
    if diff < -tables.PRICE_INDICATOR_TOLERANCE:
        return PriceIndicator.OPPORTUNITY
    return PriceIndicator.MARKET


class FactorModel(ValuationModel):
    """
    Multiplicative base-price model.

    City base price per m² × location × type × condition × layout, times
    ``(1 + adjustment)`` for floor, orientation, amenities, age, parking and
    quality. The liquidity score (location × layout × condition × amenities)
    sets both the width of the price band and the expected time to sell.

    ``reference_year`` pins "now" for the age and renovation rules; left unset
    it is the current calendar year.
    """

    def __init__(self, reference_year: Optional[int] = None):
        self.reference_year = reference_year

    def _current_year(self) -> int:
        return self.reference_year or date.today().year

    def estimate(
        self,
        descriptor: PropertyDescriptor,
        stats: Optional[NeighborhoodStatistics] = None,
    ) -> ValuationResult:
        descriptor.validate()
        year = self._current_year()

        base_price = factors.base_price_per_sqm(descriptor.city)
        location = factors.location_factor(base_price, stats)
        area = factors.effective_area(
            descriptor.covered_area, descriptor.total_area, descriptor.semi_covered_area
        )

        type_factor = factors.property_type_factor(descriptor.property_type)
        condition = factors.condition_factor(descriptor.condition)
        layout = factors.layout_efficiency(descriptor.rooms, descriptor.bedrooms)
        floor = factors.floor_adjustment(
            descriptor.floor_number, descriptor.total_floors, descriptor.has_elevator
        )
        orientation = factors.orientation_bonus(descriptor.orientation)
        amenities = factors.amenities_score(descriptor.amenities)
        age = factors.age_depreciation(
            descriptor.building_age,
            descriptor.condition,
            descriptor.renovation_year,
            year,
        )
        parking = factors.parking_value(descriptor.parking_spaces, stats)
        quality = factors.quality_adjustments(
            descriptor.natural_lighting, descriptor.noise_level, descriptor.view_quality
        )

        multiplier = (
            location
            * type_factor
            * condition
            * layout
            * (1 + floor)
            * (1 + orientation)
            * (1 + amenities)
            * (1 + age)
            * (1 + parking)
            * (1 + quality)
        )
        final_price_per_sqm = base_price * multiplier
        # Sub-m² inputs can round to zero; keep the estimate strictly positive
        suggested = max(1, round_half_up(area * final_price_per_sqm))

        liquidity = location * layout * condition * (1 + amenities)
        variance = _pick_band(liquidity, tables.VARIANCE_BANDS, tables.VARIANCE_FLOOR)
        estimated_min = round_half_up(suggested * (1 - variance))
        estimated_max = round_half_up(suggested * (1 + variance))

        if stats and stats.avg_days_on_market:
            sale_days = int(stats.avg_days_on_market)
        else:
            sale_days = _pick_band(liquidity, tables.SALE_DAYS_BANDS, tables.SALE_DAYS_FLOOR)

        indicator = None
        if descriptor.asked_price:
            indicator = classify_asked_price(descriptor.asked_price, suggested)

        breakdown = ValuationBreakdown(
            base_price_per_sqm=base_price,
            effective_area=area,
            location_factor=location,
            property_type_factor=type_factor,
            condition_factor=condition,
            floor_adjustment=floor,
            orientation_bonus=orientation,
            parking_value=parking,
            amenities_score=amenities,
            age_depreciation=age,
            layout_efficiency=layout,
            quality_adjustments=quality,
            final_price_per_sqm=final_price_per_sqm,
            factors_applied=self._applied_factors(
                location, type_factor, condition, layout,
                floor, orientation, amenities, age, parking, quality,
            ),
        )

        logger.debug(
            "valued %s in %s: %s (liquidity=%.3f)",
            descriptor.property_type.value, descriptor.city, suggested, liquidity,
        )

        return ValuationResult(
            estimated_min=estimated_min,
            estimated_max=estimated_max,
            suggested_price=suggested,
            price_per_sqm=round_half_up(final_price_per_sqm),
            estimated_sale_days=sale_days,
            confidence_score=factors.confidence_score(descriptor, stats),
            breakdown=breakdown,
            price_indicator=indicator,
        )

    @staticmethod
    def _applied_factors(
        location, type_factor, condition, layout,
        floor, orientation, amenities, age, parking, quality,
    ) -> List[AppliedFactor]:
        """Human-readable list of every multiplier, with its direction."""
        def ratio(name, value):
            return AppliedFactor(name, value, Impact.POSITIVE if value > 1 else Impact.NEGATIVE)

        return [
            ratio("Location", location),
            AppliedFactor(
                "Property type", type_factor,
                Impact.NEUTRAL if type_factor >= 1 else Impact.NEGATIVE,
            ),
            ratio("Condition", condition),
            ratio("Layout", layout),
            AppliedFactor("Floor", 1 + floor, _impact(floor)),
            AppliedFactor("Orientation", 1 + orientation, _impact(orientation)),
            AppliedFactor("Amenities", 1 + amenities, _impact(amenities)),
            AppliedFactor(
                "Age", 1 + age,
                Impact.POSITIVE if age > 0 else Impact.NEGATIVE,
            ),
            AppliedFactor("Parking", 1 + parking, _impact(parking)),
            AppliedFactor("Quality", 1 + quality, _impact(quality)),
        ]


_default_model = FactorModel()


def estimate(
    descriptor: PropertyDescriptor,
    stats: Optional[NeighborhoodStatistics] = None,
) -> ValuationResult:
    """Value a property with the default factor model."""
    return _default_model.estimate(descriptor, stats)


def valuation_model() -> ValuationModel:
    """
    Factory picks the valuation model based on env flags.
    """
    provider = settings.MODEL_PROVIDER
    if provider != "factor":
        logger.warning("unknown MODEL_PROVIDER %r, using factor model", provider)
    return FactorModel()
