"""Rate limiting for the auth endpoints.

The limiter is shared by the process; the limit string and the on/off switch
come from the settings of the app serving the request.
"""

from contextvars import ContextVar

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

limiter = Limiter(key_func=get_remote_address)

_auth_rate_limit: ContextVar[str] = ContextVar("auth_rate_limit", default=settings.AUTH_RATE_LIMIT)


def auth_rate_limit() -> str:
    return _auth_rate_limit.get()


def rate_limit_disabled(request: Request) -> bool:
    return not request.app.state.backend.settings.RATE_LIMIT_ENABLED


async def bind_rate_limits(request: Request, call_next):
    """HTTP middleware exposing the app's auth limit to the limit provider."""
    token = _auth_rate_limit.set(request.app.state.backend.settings.AUTH_RATE_LIMIT)
    try:
        return await call_next(request)
    finally:
        _auth_rate_limit.reset(token)
