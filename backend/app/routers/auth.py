"""Auth router: sign-up, sign-in, federated sign-in, sign-out, and role choice."""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.backend import Backend, get_backend
from app.database import get_db
from app.errors import StoreError
from app.middleware.auth import (
    create_access_token,
    decode_token,
    get_auth_state,
    get_current_user,
    hash_password,
    security,
    verify_password,
)
from app.middleware.rate_limit import auth_rate_limit, limiter, rate_limit_disabled
from app.models.profile import AdminProfile, TeacherProfile
from app.models.user import User, ROLES
from app.schemas.auth import (
    FederatedSignInRequest,
    RoleUpdateRequest,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
    UserResponse,
)
from app.services.federated import FederatedTokenError
from app.services.role_resolver import RoleResolver
from app.services.route_guard import AuthState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PASSWORDS_DO_NOT_MATCH = "Passwords do not match."
EMAIL_IN_USE = "Email is already registered. Please use a different email."
INVALID_EMAIL = "Invalid email format. Please check your email."
NO_ACCOUNT = "No account found with this email. Please sign up first."
WRONG_PASSWORD = "Incorrect password. Please try again."
FEDERATED_FAILED = "Federated sign-in failed. Please try again."


def _check_role(role: Optional[str]) -> None:
    if role is not None and role not in ROLES:
        raise HTTPException(status_code=400, detail=f"Role must be one of: {', '.join(ROLES)}")


def _add_profile(user: User, role: Optional[str]) -> bool:
    """Attach the empty profile that teacher and admin screens edit, if missing."""
    if role == "teacher" and user.teacher_profile is None:
        user.teacher_profile = TeacherProfile(display_name=user.display_name)
    elif role == "admin" and user.admin_profile is None:
        user.admin_profile = AdminProfile()
    else:
        return False
    return True


def _ensure_profile(db: Session, user: User, role: Optional[str]) -> None:
    if not _add_profile(user, role):
        return
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError.from_exception(exc) from exc
    db.refresh(user)


def next_path(user: User, role: Optional[str]) -> str:
    """Screen to open after authentication."""
    if role == "teacher":
        profile = user.teacher_profile
        return "/teacher/dashboard" if profile and profile.is_complete else "/teacher/profile"
    if role == "admin":
        return "/admin/dashboard"
    if role == "student":
        return "/student"
    return "/"


def _user_response(user: User, role: Optional[str]) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=role,
        provider=user.provider,
        created_at=user.created_at.isoformat(),
    )


def _finish_sign_in(
    db: Session,
    backend: Backend,
    user: User,
    requested_role: Optional[str],
    message: str,
) -> TokenResponse:
    resolver = RoleResolver(db, backend.role_cache)
    role = resolver.resolve(user.id)
    if role is None and requested_role:
        # First login: the identity takes the role it signed in for
        role = resolver.set_role(user.id, requested_role)
    _ensure_profile(db, user, role)
    return TokenResponse(
        access_token=create_access_token(user, backend.settings),
        role=role,
        next_path=next_path(user, role),
        message=message,
    )


@router.post("/signup", response_model=TokenResponse, status_code=201)
@limiter.limit(auth_rate_limit, exempt_when=rate_limit_disabled)
def sign_up(
    request: Request,
    payload: SignUpRequest,
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
):
    """Create an account for the chosen role."""
    _check_role(payload.role)
    if payload.password != payload.confirm_password:
        raise HTTPException(status_code=400, detail=PASSWORDS_DO_NOT_MATCH)

    email = payload.email.strip().lower()
    if not EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail=INVALID_EMAIL)
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password is required.")

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=409, detail=EMAIL_IN_USE)

    display_name = f"{payload.first_name.strip()} {payload.last_name.strip()}".strip() or email.split("@")[0]
    # Account, role and profile are written together or not at all
    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        provider="password",
        display_name=display_name,
        mobile=payload.mobile.strip() or None,
        role=payload.role,
        role_updated_at=datetime.now(timezone.utc),
    )
    db.add(user)
    try:
        db.flush()
        _add_profile(user, payload.role)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError.from_exception(exc) from exc
    db.refresh(user)
    backend.role_cache.put(user.id, payload.role)
    logger.info("Created %s account %s", payload.role, user.id)

    message = "Account created successfully."
    if payload.role == "teacher":
        message = "Account created successfully. Please complete your profile."
    return TokenResponse(
        access_token=create_access_token(user, backend.settings),
        role=payload.role,
        next_path=next_path(user, payload.role),
        message=message,
    )


@router.post("/signin", response_model=TokenResponse)
@limiter.limit(auth_rate_limit, exempt_when=rate_limit_disabled)
def sign_in(
    request: Request,
    payload: SignInRequest,
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
):
    """Sign in with email and password."""
    _check_role(payload.role)
    email = payload.email.strip().lower()
    if not EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail=INVALID_EMAIL)

    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=401, detail=NO_ACCOUNT)
    if not user.password_hash or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail=WRONG_PASSWORD)

    return _finish_sign_in(db, backend, user, payload.role, "Signed in successfully")


@router.post("/federated", response_model=TokenResponse)
@limiter.limit(auth_rate_limit, exempt_when=rate_limit_disabled)
def federated_sign_in(
    request: Request,
    payload: FederatedSignInRequest,
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
):
    """Sign in with an ID token from the configured identity provider.

    The identity is matched by email and created on first use.
    """
    _check_role(payload.role)
    if backend.federated is None:
        raise HTTPException(status_code=404, detail="Federated sign-in is not enabled")
    try:
        identity = backend.federated.verify(payload.id_token)
    except FederatedTokenError as exc:
        logger.info("Federated token rejected: %s", exc.code)
        raise HTTPException(status_code=401, detail=FEDERATED_FAILED)

    user = db.query(User).filter(User.email == identity.email).first()
    if not user:
        user = User(
            email=identity.email,
            password_hash=None,
            provider="federated",
            display_name=identity.display_name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    return _finish_sign_in(db, backend, user, payload.role, f"Hi {user.display_name}!")


@router.post("/signout", status_code=204)
def sign_out(
    credentials=Depends(security),
    backend: Backend = Depends(get_backend),
):
    """Revoke the presented token. Unknown or expired tokens are ignored."""
    if credentials is None:
        return None
    claims = decode_token(credentials.credentials, backend.settings)
    if claims and claims.get("jti"):
        backend.revoked_tokens.revoke(claims["jti"], float(claims.get("exp", 0)))
    return None


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    state: AuthState = Depends(get_auth_state),
):
    """Get current user info with the resolved role."""
    return _user_response(current_user, state.role)


@router.put("/role", response_model=UserResponse)
def choose_role(
    payload: RoleUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    backend: Backend = Depends(get_backend),
):
    """Pick a role for an identity that does not have one yet."""
    _check_role(payload.role)
    resolver = RoleResolver(db, backend.role_cache)
    current = resolver.resolve(current_user.id)
    if current is not None and current != payload.role:
        raise HTTPException(status_code=409, detail="Role already assigned. Ask an administrator to change it.")
    role = resolver.set_role(current_user.id, payload.role)
    _ensure_profile(db, current_user, role)
    return _user_response(current_user, role)

