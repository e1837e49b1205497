from typing import Any
from cachetools import TTLCache
from .config import settings

try:
    import redis  # Optional dependency
except Exception:
    redis = None

class Cache:
    """
    Thin abstraction over Redis/in-memory so swapping is one flag away.
    Each instance owns its own in-process store, so tests can use a fresh one.
    """
    def __init__(self, ttl_seconds: int | None = None, maxsize: int = 4096):
        self.ttl = ttl_seconds or settings.CACHE_TTL_SECONDS
        self.backend = None
        self._local = TTLCache(maxsize=maxsize, ttl=self.ttl)
        if settings.USE_REDIS and redis is not None:
            self.backend = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)

    def get(self, key: str) -> Any | None:
        if self.backend:
            return self.backend.get(key)
        return self._local.get(key)

    def set(self, key: str, value: str) -> None:
        if self.backend:
            self.backend.setex(key, self.ttl, value)
        else:
            self._local[key] = value

    def clear(self) -> None:
        # Only the in-process store; Redis keys expire on their own.
        self._local.clear()

cache = Cache()
