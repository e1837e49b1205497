import hmac
import time
from fastapi import Header, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_429_TOO_MANY_REQUESTS
from .config import settings
from .cache import cache

def require_api_key(x_api_key: str | None = Header(default=None, alias="x-api-key")):
    """
    Header-based API key check. Open when API_KEY is unset (local dev).
    """
    expected = settings.API_KEY
    if not expected:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid API key")

def _caller(request: Request) -> str:
    # API key when present, else client address
    return request.headers.get("x-api-key") or (request.client.host if request.client else "unknown")

def rate_limit(request: Request):
    """
    Fixed one-minute window per caller and route, counted in the shared cache
    (per process unless Redis is enabled).
    """
    limit = max(1, settings.RATE_LIMIT_RPM)
    window = int(time.time() // 60)
    key = f"rate:{request.url.path}:{_caller(request)}:{window}"

    raw = cache.get(key)
    hits = int(raw) + 1 if raw and str(raw).isdigit() else 1
    if hits > limit:
        raise HTTPException(
            status_code=HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit of {limit} requests/minute exceeded",
            headers={"Retry-After": str(60 - int(time.time()) % 60)},
        )
    cache.set(key, str(hits))
