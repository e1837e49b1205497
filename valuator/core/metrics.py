import time
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQ_COUNT = Counter("http_requests_total", "Total HTTP requests", ["route", "method", "code"])
REQ_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["route", "method"])

VALUATIONS = Counter("valuations_total", "Valuations computed", ["price_indicator"])
COMPARABLES_FALLBACK = Counter(
    "comparables_fallback_total",
    "Comparable searches answered with synthetic evidence",
    ["reason"],
)

def record_valuation(price_indicator: str | None) -> None:
    VALUATIONS.labels(price_indicator=price_indicator or "none").inc()

def record_fallback(reason: str) -> None:
    """reason: 'empty' (no listing matched) or 'error' (listing store failed)."""
    COMPARABLES_FALLBACK.labels(reason=reason).inc()

def _route_label(request: Request) -> str:
    # Matched route template keeps label cardinality bounded; unmatched paths collapse
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"

class PromMiddleware(BaseHTTPMiddleware):
    """
    Counts requests and observes latency per route template.
    """
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - start

        route = _route_label(request)
        REQ_COUNT.labels(route=route, method=request.method, code=str(response.status_code)).inc()
        REQ_LATENCY.labels(route=route, method=request.method).observe(elapsed)
        return response

async def metrics_endpoint(request: Request):
    """
    GET /v1/metrics, scraped by Prometheus.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
