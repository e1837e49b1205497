from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers.valuation import router as valuation_router
from .core.config import settings
from .core.errors import InvalidPropertyError
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint

API_PREFIX = "/v1"

def _origins() -> list[str]:
    if not settings.ALLOW_ORIGINS:
        return ["*"]
    return [o.strip() for o in settings.ALLOW_ORIGINS.split(",") if o.strip()]

def _install_middleware(app: FastAPI) -> None:
    # Marketplace front end calls the API from the browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-Id", "Retry-After"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    if settings.PROMETHEUS_ENABLED:
        app.add_middleware(PromMiddleware)

async def _invalid_property(request: Request, exc: InvalidPropertyError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

def create_app() -> FastAPI:
    """
    Builds the ASGI app; tests call this (or use the module-level ``app``).
    """
    configure_logging()

    app = FastAPI(
        title="Property Valuation API",
        version="1.0.0",
        description="Automated valuation of listings with comparable-property evidence.",
    )
    _install_middleware(app)
    app.add_exception_handler(InvalidPropertyError, _invalid_property)

    @app.get(f"{API_PREFIX}/health", tags=["meta"])
    def health():
        return {"status": "ok", "env": settings.ENV}

    @app.get(f"{API_PREFIX}/ping", tags=["meta"])
    def ping():
        return {"pong": True}

    if settings.PROMETHEUS_ENABLED:
        app.add_route(f"{API_PREFIX}/metrics", metrics_endpoint, methods=["GET"])

    app.include_router(valuation_router, prefix=API_PREFIX, tags=["valuation"])
    return app

app = create_app()
