from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.ENABLE_RATE_LIMITING)

# Shared scope for API_RATE_LIMIT; every route decorated with it draws on one counter.
API_SCOPE = "api"


def maybe_limit(rule: str, scope: str | None = None):
    """
    slowapi decorator when rate limiting is on, identity otherwise.

    Decorated routes must take a `request: Request` parameter.
    """
    if not settings.ENABLE_RATE_LIMITING:
        def passthrough(fn):
            return fn
        return passthrough
    if scope:
        return limiter.shared_limit(rule, scope=scope)
    return limiter.limit(rule)


def maybe_limit_api():
    return maybe_limit(settings.API_RATE_LIMIT, scope=API_SCOPE)
