from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from valuator.core.cache import cache
from valuator.data.base import ComparableSearchParams
from valuator.data.listings_client import InMemoryListings
from valuator.models.base import Condition, PropertyDescriptor, PropertyType
from valuator.models.factor_model import FactorModel


REFERENCE_YEAR = 2024
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed clock for days-on-market calculations."""
    return NOW


@pytest.fixture
def model():
    """Factor model pinned to a fixed year so age rules are deterministic."""
    return FactorModel(reference_year=REFERENCE_YEAR)


@pytest.fixture
def descriptor():
    """80 m² three-room apartment in Buenos Aires, good condition, nothing else known."""
    return PropertyDescriptor(
        city="Buenos Aires",
        province="CABA",
        property_type=PropertyType.APARTMENT,
        condition=Condition.GOOD,
        covered_area=80,
        total_area=80,
        rooms=3,
        bedrooms=2,
        bathrooms=1,
    )


@pytest.fixture
def variant(descriptor):
    """Copy of the base descriptor with some fields changed."""
    def _variant(**changes) -> PropertyDescriptor:
        return replace(descriptor, **changes)
    return _variant


@pytest.fixture
def search_params():
    return ComparableSearchParams(
        city="Buenos Aires",
        neighborhood="Palermo",
        property_type=PropertyType.APARTMENT,
        covered_area=100,
        rooms=3,
    )


@pytest.fixture
def make_row():
    """Factory for listing-store rows (dicts, as the store returns them)."""
    def _create(
        id: str,
        price: float = 260_000,
        covered_area: float | None = 100,
        rooms: int = 3,
        neighborhood: str | None = "Palermo",
        age_days: float = 10,
        city: str = "Buenos Aires",
        property_type: str = "apartment",
        operation: str = "sale",
        status: str = "active",
    ) -> dict:
        return {
            "id": id,
            "address": f"Test Street {id}",
            "price": price,
            "covered_area": covered_area,
            "rooms": rooms,
            "neighborhood": neighborhood,
            "created_at": (NOW - timedelta(days=age_days)).isoformat(),
            "city": city,
            "property_type": property_type,
            "operation": operation,
            "status": status,
        }
    return _create


class FailingListings:
    """Listing store that is down."""
    async def search(self, query):
        raise RuntimeError("listing store unavailable")


class RecordingListings(InMemoryListings):
    """In-memory pool that remembers the last query it was asked."""
    last_query = None

    async def search(self, query):
        self.last_query = query
        return await super().search(query)


@pytest.fixture
def failing_listings():
    return FailingListings()


@pytest.fixture
def recording_listings():
    def _create(rows=()):
        return RecordingListings(rows)
    return _create


@pytest.fixture(autouse=True)
def _reset_shared_cache():
    # Rate-limit counters live in the process-wide cache
    cache.clear()
    yield
    cache.clear()
