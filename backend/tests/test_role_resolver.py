"""Tests for role resolution, back-fill, and the versioned role cache."""

import pytest

from app.models.user import User
from app.services.role_cache import RoleCache
from app.services.role_resolver import RoleResolver


def _user(db, email="someone@example.edu", role=None):
    user = User(email=email, password_hash=None, display_name="Someone", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class TestResolve:
    """Test the store -> cache -> none resolution order."""

    def test_no_record_no_cache(self, db):
        """Without a RoleRecord or cached role the identity has no role."""
        user = _user(db)
        assert RoleResolver(db, RoleCache()).resolve(user.id) is None

    def test_unknown_identity(self, db):
        assert RoleResolver(db, RoleCache()).resolve("missing") is None

    def test_store_wins_over_cache(self, db):
        user = _user(db, role="teacher")
        cache = RoleCache()
        cache.put(user.id, "student")
        assert RoleResolver(db, cache).resolve(user.id) == "teacher"
        assert cache.get(user.id) == "teacher"

    def test_cache_only_back_fills_store(self, db):
        """A role found only in the cache is written to the RoleRecord."""
        user = _user(db)
        cache = RoleCache()
        cache.put(user.id, "admin")

        assert RoleResolver(db, cache).resolve(user.id) == "admin"

        db.expire_all()
        stored = db.query(User).filter(User.id == user.id).first()
        assert stored.role == "admin"
        assert stored.role_updated_at is not None

        # Next resolution reads from the store even with an empty cache
        assert RoleResolver(db, RoleCache()).resolve(user.id) == "admin"


class TestSetRole:
    """Test role assignment."""

    def test_set_role_persists_and_caches(self, db):
        user = _user(db)
        cache = RoleCache()
        assert RoleResolver(db, cache).set_role(user.id, "teacher") == "teacher"
        assert cache.get(user.id) == "teacher"
        db.expire_all()
        assert db.query(User).filter(User.id == user.id).first().role == "teacher"

    def test_last_write_wins(self, db):
        user = _user(db)
        resolver = RoleResolver(db, RoleCache())
        resolver.set_role(user.id, "teacher")
        resolver.set_role(user.id, "admin")
        assert resolver.resolve(user.id) == "admin"

    def test_rejects_unknown_role(self, db):
        user = _user(db)
        with pytest.raises(ValueError):
            RoleResolver(db, RoleCache()).set_role(user.id, "principal")

    def test_unknown_user(self, db):
        with pytest.raises(LookupError):
            RoleResolver(db, RoleCache()).set_role("missing", "student")


class TestRoleCache:
    """Test cache versioning and expiry."""

    def test_version_bump_invalidates(self):
        cache = RoleCache(version=1)
        cache.put("u1", "student")
        cache.bump_version()
        assert cache.get("u1") is None

    def test_entries_from_other_version_ignored(self):
        old = RoleCache(version=1)
        old.put("u1", "teacher")
        old.version = 2
        assert old.get("u1") is None

    def test_expired_entry(self):
        cache = RoleCache(ttl_seconds=-1)
        cache.put("u1", "admin")
        assert cache.get("u1") is None

    def test_invalidate_and_clear(self):
        cache = RoleCache()
        cache.put("u1", "admin")
        cache.put("u2", "student")
        cache.invalidate("u1")
        assert cache.get("u1") is None
        assert cache.get("u2") == "student"
        cache.clear()
        assert cache.get("u2") is None
