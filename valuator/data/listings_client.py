import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import httpx

from .base import (
    Comparable,
    ComparableSearchParams,
    ComparablesFallback,
    ListingQuery,
    ListingRecord,
    ListingsClient,
)
from ..core.config import settings
from ..core.utils import as_utc, parse_timestamp, round_half_up

logger = logging.getLogger(__name__)


def listing_from_json(item: dict) -> ListingRecord:
    """Listing store rows use snake_case column names."""
    covered = item.get("covered_area")
    return ListingRecord(
        id=str(item["id"]),
        address=item.get("address") or "",
        price=float(item["price"]),
        rooms=int(item.get("rooms") or 0),
        created_at=parse_timestamp(item["created_at"]),
        covered_area=float(covered) if covered is not None else None,
        neighborhood=item.get("neighborhood"),
    )


class InMemoryListings(ListingsClient):
    """
    Listing pool held in memory, filtered the way the listing store would.
    Listings must carry ``city``, ``property_type``, ``operation`` and
    ``status`` besides the comparable fields, so rows are kept as dicts.
    """

    def __init__(self, rows: Optional[Iterable[dict]] = None):
        self._rows = [dict(r) for r in (rows or [])]

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryListings":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"{path} must contain a JSON array of listings")
        return cls(raw)

    def _matches(self, row: dict, query: ListingQuery) -> bool:
        area = row.get("covered_area")
        rooms = row.get("rooms")
        if area is None or rooms is None:
            return False
        return (
            row.get("city") == query.city
            and row.get("property_type") == query.property_type.value
            and row.get("operation", "sale") == query.operation
            and row.get("status", "active") in query.statuses
            and query.area_min <= area <= query.area_max
            and query.rooms_min <= rooms <= query.rooms_max
            and (query.exclude_id is None or str(row.get("id")) != query.exclude_id)
        )

    async def search(self, query: ListingQuery) -> List[ListingRecord]:
        records = [listing_from_json(r) for r in self._rows if self._matches(r, query)]
        records.sort(key=lambda r: as_utc(r.created_at), reverse=query.newest_first)
        return records[: query.limit]


class HttpListings(ListingsClient):
    """
    Client for the marketplace's listing service.
    ``GET {base_url}/listings`` returns a JSON array of listing rows.
    """

    def __init__(self, base_url: str, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.transport = transport

    def _params(self, query: ListingQuery) -> dict:
        params = {
            "city": query.city,
            "property_type": query.property_type.value,
            "operation_type": query.operation,
            "status": ",".join(query.statuses),
            "covered_area_min": query.area_min,
            "covered_area_max": query.area_max,
            "rooms_min": query.rooms_min,
            "rooms_max": query.rooms_max,
            "order": "created_at.desc" if query.newest_first else "created_at.asc",
            "limit": query.limit,
        }
        if query.exclude_id:
            params["exclude_id"] = query.exclude_id
        return params

    async def search(self, query: ListingQuery) -> List[ListingRecord]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            r = await client.get(f"{self.base_url}/listings", params=self._params(query))
            r.raise_for_status()
            items = r.json()
            return [listing_from_json(i) for i in items]


class SyntheticComparables(ComparablesFallback):
    """
    Eight placeholder listings spread around a reference price per m².
    Deterministic: the same search always yields the same set.
    """

    AREA_VARIATION = (-15, -8, -3, 0, 5, 10, 12, 18)
    PRICE_VARIATION = (-12, -8, -5, -2, 3, 6, 9, 15)
    STREETS = (
        "Av. Santa Fe", "Av. Córdoba", "Av. Corrientes", "Av. Las Heras",
        "Thames", "Gurruchaga", "Charcas", "Arenales",
    )
    NUMBERS = (1200, 1850, 2340, 2890, 3450, 4120, 4560, 5230)

    def __init__(self, base_price_per_sqm: float | None = None):
        self.base_price_per_sqm = base_price_per_sqm or settings.SYNTHETIC_BASE_PRICE_PER_SQM

    def comparables(self, params: ComparableSearchParams) -> List[Comparable]:
        out: List[Comparable] = []
        for i, (area_var, price_var) in enumerate(zip(self.AREA_VARIATION, self.PRICE_VARIATION)):
            area = max(1, round_half_up(params.covered_area * (1 + area_var / 100)))
            price_per_sqm = round_half_up(self.base_price_per_sqm * (1 + price_var / 100))
            out.append(Comparable(
                id=f"synthetic-{i}",
                address=f"{self.STREETS[i]} {self.NUMBERS[i]}",
                price=area * price_per_sqm,
                covered_area=area,
                price_per_sqm=price_per_sqm,
                days_on_market=30 + i * 10,
            ))
        return out


def listings_client() -> ListingsClient:
    """
    Factory picks in-memory or http based on env flags.
    """
    if settings.LISTINGS_PROVIDER == "http" and settings.LISTINGS_BASE_URL:
        return HttpListings(settings.LISTINGS_BASE_URL)
    if settings.LISTINGS_FIXTURE_PATH:
        return InMemoryListings.from_json(settings.LISTINGS_FIXTURE_PATH)
    return InMemoryListings()


def fallback_comparables() -> ComparablesFallback:
    return SyntheticComparables(settings.SYNTHETIC_BASE_PRICE_PER_SQM)
