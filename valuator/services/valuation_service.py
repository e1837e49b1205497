import json
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from ..core.cache import Cache, cache as default_cache
from ..core.config import settings
from ..core.metrics import record_valuation
from ..core.utils import stable_key, weak_etag
from ..data.base import (
    ComparableSearchParams,
    ComparableSet,
    ComparablesFallback,
    ListingsClient,
    NeighborhoodStatsClient,
)
from ..data.listings_client import fallback_comparables, listings_client
from ..data.stats_client import stats_client
from ..models.base import NeighborhoodStatistics, PropertyDescriptor, ValuationModel
from ..models.factor_model import valuation_model
from ..schemas import ComparablesRequest, ValuationRequest
from .comparables import find_comparables, market_summary

logger = logging.getLogger(__name__)

DISCLAIMER = "This valuation is an estimate and not a formal appraisal."


def _dump(payload: dict) -> str:
    return json.dumps(payload, separators=(",", ":"), default=str)


class ValuationService:
    """
    Orchestrates:
      property → neighborhood stats + comparables → factor model → value report
    Handles caching and ETag generation for repeat requests.
    """
    def __init__(
        self,
        model: Optional[ValuationModel] = None,
        listings: Optional[ListingsClient] = None,
        stats: Optional[NeighborhoodStatsClient] = None,
        fallback: Optional[ComparablesFallback] = None,
        cache: Optional[Cache] = None,
    ):
        self.model = model or valuation_model()
        self.listings = listings or listings_client()
        self.stats = stats or stats_client()
        self.fallback = fallback or fallback_comparables()
        self.cache = cache or default_cache

    async def neighborhood_stats(self, descriptor: PropertyDescriptor) -> Optional[NeighborhoodStatistics]:
        """Statistics are optional input; a failing lookup just lowers confidence."""
        if not descriptor.neighborhood:
            return None
        try:
            return await self.stats.lookup(descriptor.city, descriptor.neighborhood)
        except Exception:
            logger.warning(
                "neighborhood stats lookup failed for %s/%s",
                descriptor.city, descriptor.neighborhood, exc_info=True,
            )
            return None

    async def comparables(self, params: ComparableSearchParams, now: Optional[datetime] = None) -> ComparableSet:
        return await find_comparables(params, self.listings, fallback=self.fallback, now=now)

    async def search_comparables(self, body: ComparablesRequest) -> dict:
        found = await self.comparables(body.to_params())
        return {
            "comparables": [asdict(c) for c in found.comparables],
            "is_synthetic": found.is_synthetic,
            "market": market_summary(found.comparables),
        }

    async def value_property(self, body: ValuationRequest) -> tuple[dict, bool, str]:
        """Returns (report payload, served from cache, etag)."""
        cache_key = stable_key("valuation", body.model_dump(mode="json"))
        cached = self.cache.get(cache_key)
        if cached:
            payload = json.loads(cached)
            return payload, True, weak_etag(cached.encode("utf-8"))

        # Validates covered_area before any collaborator is called
        descriptor = body.to_descriptor()
        descriptor.validate()

        stats = await self.neighborhood_stats(descriptor)
        found = await self.comparables(ComparableSearchParams(
            city=descriptor.city,
            neighborhood=descriptor.neighborhood,
            property_type=descriptor.property_type,
            covered_area=descriptor.covered_area,
            rooms=descriptor.rooms,
            exclude_property_id=body.property_id,
        ))
        result = self.model.estimate(descriptor, stats)
        valuation = result.to_dict()
        record_valuation(valuation["price_indicator"])
        payload = {
            "report_type": body.report_type,
            "address": body.address,
            "city": descriptor.city,
            "neighborhood": descriptor.neighborhood,
            "province": descriptor.province,
            "property_type": descriptor.property_type.value,
            "property_id": body.property_id,
            "currency": settings.DEFAULT_CURRENCY,
            "suggested_price": valuation["suggested_price"],
            "range": {"low": valuation["estimated_min"], "high": valuation["estimated_max"]},
            "price_per_sqm": valuation["price_per_sqm"],
            "estimated_sale_days": valuation["estimated_sale_days"],
            "confidence": valuation["confidence_score"],
            "price_indicator": valuation["price_indicator"],
            "breakdown": valuation["breakdown"],
            "comparables": [asdict(c) for c in found.comparables],
            "comparables_synthetic": found.is_synthetic,
            "market": market_summary(found.comparables),
            "disclaimer": DISCLAIMER,
            "cached": False,
        }
        logger.info(
            "valuation %s %s in %s: %s (confidence %s, synthetic comps=%s)",
            body.report_type, descriptor.property_type.value, descriptor.city,
            result.suggested_price, result.confidence_score, found.is_synthetic,
        )

        serialized = _dump(payload)
        self.cache.set(cache_key, serialized)
        return payload, False, weak_etag(serialized.encode("utf-8"))
