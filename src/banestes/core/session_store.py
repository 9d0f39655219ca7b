"""Session-scoped storage for listing state (search text and page)."""

import threading
from datetime import datetime, timedelta
from typing import Optional, Protocol

from banestes.core.config import get_settings
from banestes.core.logging import get_logger
from banestes.domain.services.listing import ListingState

logger = get_logger(__name__)


class SessionStateStore(Protocol):
    """Load/save listing state at view lifecycle boundaries."""

    def load(self, session_id: str) -> ListingState:
        ...

    def save(self, session_id: str, state: ListingState) -> None:
        ...

    def clear(self, session_id: str) -> None:
        ...


class InMemorySessionStore:
    """Process-wide listing state keyed by session ID.

    Entries expire after ``ttl`` of inactivity, which is when the session
    is considered ended.
    """

    def __init__(self, ttl: timedelta = timedelta(hours=2)) -> None:
        self.ttl = ttl
        self._states: dict[str, tuple[ListingState, datetime]] = {}
        self._lock = threading.Lock()

    def _expired(self, touched_at: datetime) -> bool:
        return datetime.now() - touched_at > self.ttl

    def _purge_locked(self) -> int:
        now = datetime.now()
        expired = [sid for sid, (_, touched_at) in self._states.items() if now - touched_at > self.ttl]
        for sid in expired:
            del self._states[sid]
        return len(expired)

    def load(self, session_id: str) -> ListingState:
        """Stored state for the session, or a fresh one."""
        with self._lock:
            entry = self._states.get(session_id)
            if entry is None:
                return ListingState()

            state, touched_at = entry
            if self._expired(touched_at):
                logger.debug("Session state expired", session_id=session_id)
                del self._states[session_id]
                return ListingState()

            return ListingState(state.search_text, state.current_page)

    def save(self, session_id: str, state: ListingState) -> None:
        """Store a copy of ``state`` for the session.

        Expired sessions are dropped on every save, so the store only holds
        sessions active within the TTL.
        """
        with self._lock:
            self._purge_locked()
            self._states[session_id] = (
                ListingState(state.search_text, state.current_page),
                datetime.now(),
            )

    def clear(self, session_id: str) -> None:
        """Forget the session's state."""
        with self._lock:
            self._states.pop(session_id, None)

    def purge_expired(self) -> int:
        """Drop expired sessions, returning how many were removed."""
        with self._lock:
            return self._purge_locked()

    def __len__(self) -> int:
        return len(self._states)


_store: Optional[InMemorySessionStore] = None


def get_session_store() -> InMemorySessionStore:
    """Process-wide session store."""
    global _store
    if _store is None:
        _store = InMemorySessionStore(ttl=timedelta(minutes=get_settings().session_ttl_minutes))
    return _store
