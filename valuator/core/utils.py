import hashlib
import json
import math
from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

T = TypeVar("T")

def unwrap_or(value: Optional[T], neutral: T) -> T:
    """
    Resolve an optional input to its neutral value when absent.
    Every "unknown means no effect" rule in the valuation goes through here.
    """
    return neutral if value is None else value

def round_half_up(value: float) -> int:
    """Nearest integer with exact halves rounded up (2500.5 -> 2501), unlike round()."""
    return math.floor(value + 0.5)

def normalize_tag(value: str | None) -> str | None:
    """
    Lowercase/trim free-form tags (orientation, view, amenity names) so
    table lookups are stable. Blank strings count as absent.
    """
    if value is None:
        return None
    tag = "_".join(value.strip().lower().split())
    return tag or None

def as_utc(ts: datetime) -> datetime:
    """Naive timestamps from the listing store are taken to be UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts

def parse_timestamp(raw: str) -> datetime:
    """ISO-8601 parser tolerant of the trailing 'Z' most JSON APIs emit."""
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(raw))

def elapsed_days(since: datetime, now: datetime) -> int:
    """Whole days between two instants, rounded up (a listing from this morning is 1 day old)."""
    seconds = abs((as_utc(now) - as_utc(since)).total_seconds())
    return math.ceil(seconds / 86400)

def stable_key(prefix: str, payload: Any) -> str:
    """Cache key from a JSON-able payload, independent of dict ordering."""
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return f"{prefix}:{hashlib.sha256(blob.encode('utf-8')).hexdigest()[:32]}"

def weak_etag(payload_bytes: bytes) -> str:
    """Weak ETag for client-side conditional requests."""
    h = hashlib.sha256(payload_bytes).hexdigest()[:24]
    return f'W/"{h}"'
