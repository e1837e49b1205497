import os
from pydantic import BaseModel

class Settings(BaseModel):
    # Basic
    ENV: str = os.getenv("ENV", "dev")
    DEFAULT_CURRENCY: str = os.getenv("CURRENCY", "USD")
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "3600"))

    # Valuation model
    MODEL_PROVIDER: str = os.getenv("MODEL_PROVIDER", "factor")  # factor

    # Listing pool (comparable candidates)
    LISTINGS_PROVIDER: str = os.getenv("LISTINGS_PROVIDER", "mock")      # mock | http
    LISTINGS_BASE_URL: str | None = os.getenv("LISTINGS_BASE_URL")
    LISTINGS_FIXTURE_PATH: str | None = os.getenv("LISTINGS_FIXTURE_PATH")

    # Neighborhood statistics
    STATS_PROVIDER: str = os.getenv("STATS_PROVIDER", "mock")            # mock | http
    STATS_BASE_URL: str | None = os.getenv("STATS_BASE_URL")
    STATS_FIXTURE_PATH: str | None = os.getenv("STATS_FIXTURE_PATH")

    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    # Comparable selection
    MAX_COMPARABLES: int = int(os.getenv("MAX_COMPARABLES", "8"))
    CANDIDATE_LIMIT: int = int(os.getenv("CANDIDATE_LIMIT", "50"))
    # Reference price for the synthetic comparables shown when no listings match
    SYNTHETIC_BASE_PRICE_PER_SQM: int = int(os.getenv("SYNTHETIC_BASE_PRICE_PER_SQM", "2600"))

    # Security
    API_KEY: str | None = os.getenv("API_KEY")
    RATE_LIMIT_RPM: int = int(os.getenv("RATE_LIMIT_RPM", "60"))

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Cache
    USE_REDIS: bool = os.getenv("USE_REDIS", "false").lower() == "true"
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

settings = Settings()
