"""
Session store: the set of live search sessions and their lifecycle.

A session moves CREATED -> ACTIVE -> ENDED. Ending removes it from the table
and releases its documents; the id is never handed out again.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple

from .errors import Result
from ..util.logging import logger

if TYPE_CHECKING:
    from ..vector.types import XDoc


class Session:
    """
    One client's isolated document collection.

    The document list is only touched under the session's own lock, so
    concurrent uploads into the same session serialize while other sessions
    proceed independently.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.created_at = datetime.now(timezone.utc)
        self._documents: List["XDoc"] = []
        self._dimension: Optional[int] = None
        self._lock = threading.Lock()
        self.ended = False

    @property
    def dimension(self) -> Optional[int]:
        """Vector dimension fixed by the first committed document."""
        with self._lock:
            return self._dimension

    def snapshot(self) -> Tuple["XDoc", ...]:
        """Stable view of the documents in insertion order."""
        with self._lock:
            return tuple(self._documents)

    def document_count(self) -> int:
        with self._lock:
            return len(self._documents)

    def commit(self, document: "XDoc", dimension: Optional[int]) -> bool:
        """
        Append a fully vectorized document.

        Returns False (and appends nothing) if the document's dimension
        disagrees with the one already established for this session.
        """
        with self._lock:
            if dimension is not None:
                if self._dimension is None:
                    self._dimension = dimension
                elif self._dimension != dimension:
                    return False
            self._documents.append(document)
            return True

    def discard(self) -> None:
        """Drop every document and vector; the session is ENDED."""
        with self._lock:
            self._documents.clear()
            self._dimension = None
            self.ended = True


class SessionStore:
    """Owns the table of live sessions. Safe for concurrent callers."""

    def __init__(self):
        self._sessions = {}  # session_id -> Session
        self._lock = threading.Lock()

    def create_session(self) -> str:
        """Register a new empty session and return its id."""
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = Session(session_id)
        logger.log_session_event("create", session_id)
        return session_id

    def session_exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get_session(self, session_id: str) -> Result[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return Result.not_found(session_id)
        return Result.success(session)

    def end_session(self, session_id: str) -> Result[None]:
        """Remove a session and discard its documents."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            logger.log_session_event("end", session_id, status="not_found")
            return Result.not_found(session_id)

        released = session.document_count()
        session.discard()
        logger.log_session_event("end", session_id, details={"documents_released": released})
        return Result.success()

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def list_session_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions.keys())

    def clear(self) -> None:
        """End every live session (application teardown)."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.discard()
        if sessions:
            logger.info(f"Session store cleared, {len(sessions)} sessions ended")
