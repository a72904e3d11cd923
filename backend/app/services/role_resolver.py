"""Role resolver: determines which role an identity holds.

Resolution order:
1. RoleRecord (``users.role``)
2. Role cache
3. None

A role found only in the cache is written back to the RoleRecord so the next
resolution reads it from the store. ``set_role`` commits before returning;
callers may rely on the new role for the next authorization check.
Concurrent writers are last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StoreError
from app.models.user import User, ROLES
from app.services.role_cache import RoleCache

logger = logging.getLogger(__name__)


def validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
    return role


class RoleResolver:
    def __init__(self, db: Session, cache: RoleCache):
        self.db = db
        self.cache = cache

    def resolve(self, uid: str) -> Optional[str]:
        """Return the identity's role, back-filling the store from the cache."""
        try:
            user = self.db.query(User).filter(User.id == uid).first()
        except SQLAlchemyError as exc:
            raise StoreError.from_exception(exc) from exc
        if user is None:
            return None

        if user.role:
            self.cache.put(uid, user.role)
            return user.role

        cached = self.cache.get(uid)
        if cached:
            logger.info("Back-filling role %s for user %s from cache", cached, uid)
            self._write(user, cached)
        return cached

    def set_role(self, uid: str, role: str) -> str:
        """Persist a new role, then refresh the cache."""
        validate_role(role)
        try:
            user = self.db.query(User).filter(User.id == uid).first()
        except SQLAlchemyError as exc:
            raise StoreError.from_exception(exc) from exc
        if user is None:
            raise LookupError("User not found")

        previous = user.role
        self._write(user, role)
        self.cache.put(uid, role)
        if previous != role:
            logger.info("Role for user %s changed: %s -> %s", uid, previous, role)
        return role

    def _write(self, user: User, role: str) -> None:
        user.role = role
        user.role_updated_at = datetime.now(timezone.utc)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError.from_exception(exc) from exc
