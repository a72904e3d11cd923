"""Store failure taxonomy.

Every SQLAlchemy failure surfaced to a user is mapped to one of four kinds,
each with a fixed message. Nothing is retried.
"""

from sqlalchemy import exc as sa_exc

PERMISSION_DENIED = "permission_denied"
UNAUTHENTICATED = "unauthenticated"
UNAVAILABLE = "unavailable"
UNKNOWN = "unknown"

STORE_ERROR_MESSAGES = {
    PERMISSION_DENIED: "You don't have permission to perform this action.",
    UNAUTHENTICATED: "Your session has expired. Please sign in again.",
    UNAVAILABLE: "The service is temporarily unavailable. Please try again later.",
    UNKNOWN: "Something went wrong. Please try again.",
}

STORE_ERROR_STATUS = {
    PERMISSION_DENIED: 403,
    UNAUTHENTICATED: 401,
    UNAVAILABLE: 503,
    UNKNOWN: 500,
}


class StoreError(Exception):
    """Raised when a read or write against the database fails."""

    def __init__(self, kind: str = UNKNOWN, message: str | None = None):
        self.kind = kind if kind in STORE_ERROR_MESSAGES else UNKNOWN
        self.message = message or STORE_ERROR_MESSAGES[self.kind]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STORE_ERROR_STATUS[self.kind]

    @classmethod
    def from_exception(cls, exc: Exception, message: str | None = None) -> "StoreError":
        return cls(classify(exc), message)


def classify(exc: Exception) -> str:
    """Map a SQLAlchemy exception to a store error kind."""
    text = str(getattr(exc, "orig", None) or exc).lower()
    if "permission denied" in text or "insufficient privilege" in text:
        return PERMISSION_DENIED
    if "authentication failed" in text or "access denied for user" in text:
        return UNAUTHENTICATED
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.DisconnectionError, sa_exc.TimeoutError)):
        return UNAVAILABLE
    return UNKNOWN
