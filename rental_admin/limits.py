from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware


def client_address(request: Request) -> str:
    """Rate-limit key: first proxy hop when behind one, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


# Shared limiter instance; sign-in is the only limited route
limiter = Limiter(key_func=client_address)

__all__ = [
    "limiter",
    "RateLimitExceeded",
    "SlowAPIMiddleware",
]
