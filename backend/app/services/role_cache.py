"""Role cache: secondary, versioned copy of each identity's role.

The RoleRecord on the user row is authoritative. The cache only answers when
the record is missing (e.g. a role chosen before the row existed), and every
entry is stamped with the cache version it was written under: bumping
``ROLE_CACHE_VERSION`` invalidates all entries at once.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class _CacheEntry:
    role: str
    version: int
    expires_at: float


class RoleCache:
    def __init__(self, version: int = 1, ttl_seconds: int = 3600):
        self.version = version
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, uid: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(uid)
            if not entry:
                return None
            if entry.version != self.version or entry.expires_at < time.time():
                self._entries.pop(uid, None)
                return None
            return entry.role

    def put(self, uid: str, role: str) -> None:
        with self._lock:
            self._entries[uid] = _CacheEntry(
                role=role,
                version=self.version,
                expires_at=time.time() + self.ttl_seconds,
            )

    def invalidate(self, uid: str) -> None:
        with self._lock:
            self._entries.pop(uid, None)

    def bump_version(self) -> int:
        with self._lock:
            self.version += 1
            return self.version

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
