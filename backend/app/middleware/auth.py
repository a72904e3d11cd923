"""JWT authentication middleware and dependencies.

The bearer token is the session: it is issued on sign-in, and ends on
sign-out (revocation) or expiry. Roles are not baked into the token; they are
resolved on every request so a role change applies to the next check.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.backend import Backend, get_backend
from app.config import Settings
from app.database import get_db
from app.models.user import User
from app.services.role_resolver import RoleResolver
from app.services.route_guard import AccessDenied, AuthState, SessionInfo, evaluate

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt directly (passlib is broken with bcrypt>=4.1)."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


def create_access_token(user: User, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "name": user.display_name,
        "jti": str(uuid.uuid4()),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    backend: Backend = Depends(get_backend),
) -> Optional[SessionInfo]:
    """Session provider: the identity behind the bearer token, if any."""
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials, backend.settings)
    if not payload or not payload.get("sub"):
        return None
    token_id = payload.get("jti")
    if token_id and backend.revoked_tokens.is_revoked(token_id):
        return None
    return SessionInfo(
        uid=payload["sub"],
        email=payload.get("email", ""),
        display_name=payload.get("name", ""),
        token_id=token_id,
    )


def get_auth_state(
    session: Optional[SessionInfo] = Depends(get_session),
    backend: Backend = Depends(get_backend),
    db: Session = Depends(get_db),
) -> AuthState:
    """Session plus resolved role. Resolution completes before this returns."""
    if session is None:
        return AuthState(session=None, role=None)
    role = RoleResolver(db, backend.role_cache).resolve(session.uid)
    return AuthState(session=session, role=role)


def get_current_user(
    session: Optional[SessionInfo] = Depends(get_session),
    db: Session = Depends(get_db),
) -> User:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    user = db.query(User).filter(User.id == session.uid).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


class RoleGuard:
    """Dependency that only lets identities holding one of ``allowed`` through."""

    def __init__(self, allowed: Iterable[str], fallback: str = "/"):
        self.allowed = tuple(allowed)
        self.fallback = fallback

    def __call__(
        self,
        state: AuthState = Depends(get_auth_state),
        db: Session = Depends(get_db),
    ) -> User:
        decision = evaluate(state, self.allowed, self.fallback)
        if not decision.allowed:
            logger.info(
                "Access denied (%s) for %s; allowed roles %s",
                decision.state,
                state.session.uid if state.session else "anonymous",
                self.allowed,
            )
            raise AccessDenied(decision)
        user = db.query(User).filter(User.id == state.session.uid).first()
        if not user:
            raise HTTPException(status_code=401, detail="User not found")
        return user


require_student = RoleGuard(("student",), fallback="/student")
require_teacher = RoleGuard(("teacher",), fallback="/teacher/login")
require_admin = RoleGuard(("admin",), fallback="/admin/login")
