"""Rate limiting middleware using slowapi."""

from fastapi import FastAPI
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from media_autowriter.config.settings import settings

# Initialize limiter
limiter = Limiter(key_func=get_remote_address)

# Manual generation runs are long and costly
GENERATION_RATE_LIMIT = f"{settings.rate_limit_generation_per_minute}/minute"

__all__ = ["GENERATION_RATE_LIMIT", "limiter", "setup_rate_limiting"]


def setup_rate_limiting(app: FastAPI) -> None:
    """Setup rate limiting for FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
