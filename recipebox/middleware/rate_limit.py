"""Rate limiting using slowapi."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address

from recipebox.config import settings

# Keyed by client address; extraction endpoints each cost one or more model calls
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_hour}/hour"],
    storage_uri="memory://",
)


def get_rate_limit_exceeded_handler():
    """Get rate limit exceeded handler."""
    return _rate_limit_exceeded_handler


def rate_limit_dependency(request: Request) -> None:
    """
    Apply the default limit to a route.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    if not limiter.enabled:
        return
    # slowapi has no public "check" helper outside its decorator/middleware hooks
    limiter._check_request_limit(request, endpoint_func=None)
