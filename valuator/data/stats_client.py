import json
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import httpx

from .base import NeighborhoodStatsClient
from ..core.config import settings
from ..models.base import NeighborhoodStatistics


def stats_from_json(item: dict) -> NeighborhoodStatistics:
    days = item.get("avg_days_on_market")
    return NeighborhoodStatistics(
        avg_price_per_sqm=item.get("avg_price_per_sqm"),
        avg_days_on_market=int(days) if days is not None else None,
        transport_score=item.get("transport_score"),
    )


def _key(city: str, neighborhood: str) -> Tuple[str, str]:
    return city.strip().lower(), neighborhood.strip().lower()


class InMemoryNeighborhoodStats(NeighborhoodStatsClient):
    """
    Statistics table held in memory. Rows carry ``city`` and ``neighborhood``
    plus the statistic columns; matching ignores case.
    """

    def __init__(self, rows: Optional[Iterable[dict]] = None):
        self._by_key: Dict[Tuple[str, str], NeighborhoodStatistics] = {}
        for row in rows or []:
            self._by_key[_key(row["city"], row["neighborhood"])] = stats_from_json(row)

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryNeighborhoodStats":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"{path} must contain a JSON array of neighborhood rows")
        return cls(raw)

    async def lookup(self, city: str, neighborhood: str) -> Optional[NeighborhoodStatistics]:
        return self._by_key.get(_key(city, neighborhood))


class HttpNeighborhoodStats(NeighborhoodStatsClient):
    """
    ``GET {base_url}/neighborhoods?city=..&neighborhood=..`` returns one row,
    404 (or a JSON null) when the pair is unknown.
    """

    def __init__(self, base_url: str, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.transport = transport

    async def lookup(self, city: str, neighborhood: str) -> Optional[NeighborhoodStatistics]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            r = await client.get(
                f"{self.base_url}/neighborhoods",
                params={"city": city, "neighborhood": neighborhood},
            )
            if r.status_code == 404:
                return None
            r.raise_for_status()
            item = r.json()
            if not item:
                return None
            return stats_from_json(item)


def stats_client() -> NeighborhoodStatsClient:
    if settings.STATS_PROVIDER == "http" and settings.STATS_BASE_URL:
        return HttpNeighborhoodStats(settings.STATS_BASE_URL)
    if settings.STATS_FIXTURE_PATH:
        return InMemoryNeighborhoodStats.from_json(settings.STATS_FIXTURE_PATH)
    return InMemoryNeighborhoodStats()
