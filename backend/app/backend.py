"""Backend context: the collaborators every request handler talks to.

One ``Backend`` is built per application and stored on ``app.state.backend``.
Handlers reach the database, role cache, token revocation list and federated
verifier only through it, so tests construct a backend around an in-memory
SQLite engine and pass it to ``create_app``.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.config import Settings
from app.database import Base, make_engine, make_session_factory
from app.services.federated import FederatedVerifier, build_verifier
from app.services.role_cache import RoleCache


class RevokedTokens:
    """Token ids revoked by sign-out, kept until the token would have expired."""

    def __init__(self):
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, token_id: str, expires_at: float) -> None:
        with self._lock:
            self._entries[token_id] = expires_at

    def is_revoked(self, token_id: str) -> bool:
        now = time.time()
        with self._lock:
            for tid in [t for t, exp in self._entries.items() if exp < now]:
                del self._entries[tid]
            return token_id in self._entries


@dataclass
class Backend:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    role_cache: RoleCache
    federated: Optional[FederatedVerifier] = None
    revoked_tokens: RevokedTokens = field(default_factory=RevokedTokens)

    def create_tables(self) -> None:
        import app.models  # noqa: F401  registers mappers on Base.metadata
        Base.metadata.create_all(bind=self.engine)


def build_backend(settings: Settings, federated: Optional[FederatedVerifier] = None) -> Backend:
    engine = make_engine(settings.DATABASE_URL)
    return Backend(
        settings=settings,
        engine=engine,
        session_factory=make_session_factory(engine),
        role_cache=RoleCache(
            version=settings.ROLE_CACHE_VERSION,
            ttl_seconds=settings.ROLE_CACHE_TTL_SECONDS,
        ),
        federated=federated or build_verifier(
            settings.FEDERATED_ISSUER,
            settings.FEDERATED_AUDIENCE,
            settings.FEDERATED_JWKS_URL,
        ),
    )


def get_backend(request: Request) -> Backend:
    """FastAPI dependency returning the application's backend context."""
    return request.app.state.backend
