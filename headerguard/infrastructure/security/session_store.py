"""
In-memory SessionStore adapter.

Keeps session slots in a process-local dict guarded by a lock.
Sessions expire ttl_seconds after they were last accessed, matching the
sliding max-age of the session cookie. An expired session reads as empty
and is dropped lazily, by purge_expired(), or by the sweep that runs
every purge_every writes.
"""

import logging
import threading
import time
from typing import Callable, Optional

from headerguard.domain.security.ports import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_PURGE_EVERY = 256


class InMemorySessionStore(SessionStore):
    """Thread-safe in-memory implementation of SessionStore."""

    def __init__(
        self,
        ttl_seconds: float = 7200.0,
        clock: Callable[[], float] = time.monotonic,
        purge_every: int = DEFAULT_PURGE_EVERY,
    ) -> None:
        if purge_every < 1:
            raise ValueError("purge_every must be >= 1")
        self._ttl = ttl_seconds
        self._clock = clock
        self._purge_every = purge_every
        self._writes_since_purge = 0
        self._lock = threading.Lock()
        self._sessions: dict[str, tuple[float, dict[str, str]]] = {}

    def get(self, session_id: str, key: str) -> Optional[str]:
        with self._lock:
            slots = self._live_slots(session_id)
            return slots.get(key) if slots is not None else None

    def set(self, session_id: str, key: str, value: str) -> None:
        with self._lock:
            self._write(session_id, key, value)

    def get_or_create(
        self, session_id: str, key: str, factory: Callable[[], str]
    ) -> str:
        with self._lock:
            slots = self._live_slots(session_id)
            if slots is not None and key in slots:
                return slots[key]
            # factory() failing leaves the session untouched.
            value = factory()
            self._write(session_id, key, value)
            return value

    def delete(self, session_id: str, key: str) -> None:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is not None:
                entry[1].pop(key, None)

    def clear_session(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        """Drop every expired session. Returns the number removed."""
        with self._lock:
            removed = self._purge()
        if removed:
            logger.debug("Purged %d expired sessions", removed)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    # Callers must hold self._lock.

    def _live_slots(self, session_id: str) -> Optional[dict[str, str]]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        expires_at, slots = entry
        now = self._clock()
        if expires_at <= now:
            del self._sessions[session_id]
            return None
        self._sessions[session_id] = (now + self._ttl, slots)
        return slots

    def _write(self, session_id: str, key: str, value: str) -> None:
        self._writes_since_purge += 1
        if self._writes_since_purge >= self._purge_every:
            self._purge()
        slots = self._live_slots(session_id) or {}
        slots[key] = value
        self._sessions[session_id] = (self._clock() + self._ttl, slots)

    def _purge(self) -> int:
        now = self._clock()
        expired = [sid for sid, (exp, _) in self._sessions.items() if exp <= now]
        for sid in expired:
            del self._sessions[sid]
        self._writes_since_purge = 0
        return len(expired)
