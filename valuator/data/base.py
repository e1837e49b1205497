from typing import Protocol, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime

from ..models.base import NeighborhoodStatistics, PropertyType

# ----- Data shapes (thin & explicit) -----

@dataclass(frozen=True)
class ComparableSearchParams:
    city: str
    property_type: PropertyType
    covered_area: float
    rooms: int
    neighborhood: Optional[str] = None
    exclude_property_id: Optional[str] = None

@dataclass(frozen=True)
class ListingQuery:
    """Exactly what the comparable selector asks of the listing store."""
    city: str
    property_type: PropertyType
    area_min: float
    area_max: float
    rooms_min: int
    rooms_max: int
    operation: str = "sale"
    statuses: Tuple[str, ...] = ("active", "sold")
    exclude_id: Optional[str] = None
    limit: int = 50
    newest_first: bool = True

@dataclass(frozen=True)
class ListingRecord:
    """A listing as stored by the marketplace (only the fields comparables need)."""
    id: str
    address: str
    price: float
    rooms: int
    created_at: datetime
    covered_area: Optional[float] = None
    neighborhood: Optional[str] = None

@dataclass(frozen=True)
class Comparable:
    id: str
    address: str
    price: float
    covered_area: float
    price_per_sqm: int          # round(price / covered_area)
    days_on_market: int

@dataclass
class ComparableSet:
    comparables: List[Comparable] = field(default_factory=list)
    # True when no real listing matched and placeholder evidence was generated
    is_synthetic: bool = False

# ----- Protocols (interfaces) -----

class ListingsClient(Protocol):
    async def search(self, query: ListingQuery) -> List[ListingRecord]: ...

class NeighborhoodStatsClient(Protocol):
    async def lookup(self, city: str, neighborhood: str) -> Optional[NeighborhoodStatistics]: ...

class ComparablesFallback(Protocol):
    """Evidence to show when the listing store has nothing to offer."""
    def comparables(self, params: ComparableSearchParams) -> List[Comparable]: ...
