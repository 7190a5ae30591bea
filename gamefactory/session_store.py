from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from gamefactory.api.models import Session

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _now() -> datetime:
    return datetime.now(tz=UTC)


class SessionStore:
    """Memory-resident session store with idle-TTL eviction.

    Sessions are lost on restart. Reads hand out deep copies, so the only way
    to change a stored session is ``create``/``update``; both stamp
    ``last_turn_at`` from the injected clock, which is what the sweep measures.

    Callers serialize read-modify-write sequences on one session with
    ``lock(ref)``; the sweep takes the same lock before evicting.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(hours=4),
        sweep_interval: timedelta = timedelta(minutes=30),
        clock: Clock = _now,
    ) -> None:
        self._ttl = ttl
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def now(self) -> datetime:
        return self._clock()

    def get(self, session_ref: str) -> Session | None:
        with self._guard:
            session = self._sessions.get(session_ref)
        return session.model_copy(deep=True) if session is not None else None

    def has(self, session_ref: str) -> bool:
        with self._guard:
            return session_ref in self._sessions

    def create(self, session: Session) -> Session:
        stored = session.model_copy(deep=True, update={"last_turn_at": self._clock()})
        with self._guard:
            self._sessions[stored.session_ref] = stored
        return stored.model_copy(deep=True)

    def update(self, session_ref: str, /, **fields: Any) -> Session | None:
        """Merge ``fields`` into the stored session; None if it no longer exists.

        ``last_turn_at`` is always refreshed, whatever the caller passed.
        """

        with self._guard:
            existing = self._sessions.get(session_ref)
            if existing is None:
                return None
            updated = existing.model_copy(deep=True, update={**fields, "last_turn_at": self._clock()})
            self._sessions[session_ref] = updated
        return updated.model_copy(deep=True)

    def save(self, session: Session) -> Session | None:
        """Write back a whole session previously obtained from ``get``."""

        fields = {name: getattr(session, name) for name in Session.model_fields if name != "session_ref"}
        return self.update(session.session_ref, **fields)

    def delete(self, session_ref: str) -> bool:
        with self._guard:
            self._key_locks.pop(session_ref, None)
            return self._sessions.pop(session_ref, None) is not None

    def count(self) -> int:
        with self._guard:
            return len(self._sessions)

    def clear(self) -> None:
        with self._guard:
            self._sessions.clear()
            self._key_locks.clear()

    @contextmanager
    def lock(self, session_ref: str) -> Iterator[None]:
        """Hold the per-session lock for a load -> compute -> store sequence."""

        with self._guard:
            key_lock = self._key_locks.setdefault(session_ref, threading.Lock())
        try:
            with key_lock:
                yield
        finally:
            with self._guard:
                # Don't let lookups of unknown refs accumulate locks.
                if session_ref not in self._sessions and self._key_locks.get(session_ref) is key_lock:
                    del self._key_locks[session_ref]

    def sweep(self) -> int:
        """Evict sessions idle for longer than the TTL. Returns how many were removed."""

        now = self._clock()
        with self._guard:
            stale = [ref for ref, s in self._sessions.items() if now - s.last_turn_at > self._ttl]

        removed = 0
        for ref in stale:
            with self._guard:
                key_lock = self._key_locks.setdefault(ref, threading.Lock())
            # A locked session is mid-update, so it is not idle; next cycle will look again.
            if not key_lock.acquire(blocking=False):
                continue
            try:
                with self._guard:
                    session = self._sessions.get(ref)
                    if session is None:
                        self._key_locks.pop(ref, None)
                    elif now - session.last_turn_at > self._ttl:
                        del self._sessions[ref]
                        self._key_locks.pop(ref, None)
                        removed += 1
            finally:
                key_lock.release()

        if removed:
            logger.info("evicted %d idle sessions (active=%d)", removed, self.count())
        return removed

    def start(self) -> None:
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop.clear()
        # Daemon thread: best-effort maintenance must never hold the process open.
        self._sweeper = threading.Thread(target=self._run_sweeper, name="session-sweep", daemon=True)
        self._sweeper.start()

    def stop(self) -> None:
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=5)
            self._sweeper = None

    def _run_sweeper(self) -> None:
        interval = self._sweep_interval.total_seconds()
        while not self._stop.wait(interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("session sweep failed")
