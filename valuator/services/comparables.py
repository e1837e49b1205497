"""
Comparable selection: query the listing pool around the subject property,
rank candidates by similarity and keep the best few as market evidence.

When the pool has nothing to offer (no match, or the listing store is
unavailable) a fallback policy supplies placeholder comparables so callers
always get something to show; the result is then flagged ``is_synthetic``.
"""

import logging
from datetime import datetime, timezone
from statistics import mean, median
from typing import List, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.errors import InvalidPropertyError
from ..core.metrics import record_fallback
from ..core.utils import elapsed_days, round_half_up
from ..data.base import (
    Comparable,
    ComparableSearchParams,
    ComparableSet,
    ComparablesFallback,
    ListingQuery,
    ListingRecord,
    ListingsClient,
)
from ..data.listings_client import SyntheticComparables

logger = logging.getLogger(__name__)

AREA_TOLERANCE = 0.30
ROOMS_BELOW = 1
ROOMS_ABOVE = 2

AREA_PENALTY = 30
ROOM_PENALTY = 10
SAME_NEIGHBORHOOD_BONUS = 20
OTHER_NEIGHBORHOOD_PENALTY = 10


def search_window(params: ComparableSearchParams) -> Tuple[float, float, int, int]:
    """(area_min, area_max, rooms_min, rooms_max) for plausible candidates."""
    area_min = params.covered_area * (1 - AREA_TOLERANCE)
    area_max = params.covered_area * (1 + AREA_TOLERANCE)
    rooms_min = max(1, params.rooms - ROOMS_BELOW)
    rooms_max = params.rooms + ROOMS_ABOVE
    return area_min, area_max, rooms_min, rooms_max


def build_query(params: ComparableSearchParams, limit: int | None = None) -> ListingQuery:
    area_min, area_max, rooms_min, rooms_max = search_window(params)
    return ListingQuery(
        city=params.city,
        property_type=params.property_type,
        area_min=area_min,
        area_max=area_max,
        rooms_min=rooms_min,
        rooms_max=rooms_max,
        exclude_id=params.exclude_property_id,
        limit=limit or settings.CANDIDATE_LIMIT,
    )


def similarity_score(
    target_area: float,
    target_rooms: int,
    area: float,
    rooms: int,
    same_neighborhood: bool,
) -> float:
    """100 for an identical unit, less for size/room differences, never below 0."""
    score = 100.0
    score -= abs(area - target_area) / target_area * AREA_PENALTY
    score -= abs(rooms - target_rooms) * ROOM_PENALTY
    score += SAME_NEIGHBORHOOD_BONUS if same_neighborhood else -OTHER_NEIGHBORHOOD_PENALTY
    return max(0.0, score)


def to_comparable(record: ListingRecord, params: ComparableSearchParams, now: datetime) -> Comparable:
    # Listings without a surface are assumed to match the subject
    area = record.covered_area or params.covered_area
    return Comparable(
        id=record.id,
        address=record.address,
        price=record.price,
        covered_area=area,
        price_per_sqm=round_half_up(record.price / area),
        days_on_market=elapsed_days(record.created_at, now),
    )


def rank_candidates(
    records: Sequence[ListingRecord],
    params: ComparableSearchParams,
) -> List[ListingRecord]:
    """Most similar first; ties keep the pool order (newest first)."""
    scored = [
        (
            similarity_score(
                params.covered_area,
                params.rooms,
                r.covered_area or params.covered_area,
                r.rooms,
                r.neighborhood == params.neighborhood,
            ),
            r,
        )
        for r in records
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [r for _, r in scored]


async def find_comparables(
    params: ComparableSearchParams,
    source: ListingsClient,
    fallback: Optional[ComparablesFallback] = None,
    now: Optional[datetime] = None,
    limit: int | None = None,
) -> ComparableSet:
    """
    Best matching listings for the subject, at most ``MAX_COMPARABLES``.
    Never empty: falls back to ``fallback`` (synthetic by default).
    """
    if params.covered_area is None or not params.covered_area > 0:
        raise InvalidPropertyError(
            f"covered_area must be a positive number, got {params.covered_area!r}",
            field="covered_area",
        )
    limit = limit or settings.MAX_COMPARABLES
    now = now or datetime.now(timezone.utc)

    try:
        records = await source.search(build_query(params))
    except Exception:
        # Evidence is advisory: a failing listing store must not block a valuation
        logger.warning("listing search failed for %s/%s", params.city, params.property_type.value, exc_info=True)
        record_fallback("error")
        records = None
    else:
        if not records:
            logger.info("no listings match %s/%s, using fallback comparables", params.city, params.property_type.value)
            record_fallback("empty")

    if not records:
        policy = fallback or SyntheticComparables()
        return ComparableSet(comparables=policy.comparables(params), is_synthetic=True)

    top = rank_candidates(records, params)[:limit]
    return ComparableSet(comparables=[to_comparable(r, params, now) for r in top], is_synthetic=False)


def median_price_per_sqm(comparables: Sequence[Comparable]) -> int:
    if not comparables:
        return 0
    return round_half_up(median(c.price_per_sqm for c in comparables))


def average_days_on_market(comparables: Sequence[Comparable]) -> int:
    if not comparables:
        return 0
    return round_half_up(mean(c.days_on_market for c in comparables))


def market_summary(comparables: Sequence[Comparable]) -> dict:
    """Headline figures of a comparable set, for reports."""
    prices = [c.price for c in comparables]
    return {
        "count": len(comparables),
        "median_price_per_sqm": median_price_per_sqm(comparables),
        "avg_days_on_market": average_days_on_market(comparables),
        "min_price": min(prices) if prices else 0,
        "max_price": max(prices) if prices else 0,
    }
