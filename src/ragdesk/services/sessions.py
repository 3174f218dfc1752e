"""Process-lifetime conversation history keyed by session id."""

from __future__ import annotations

import threading
from typing import Dict, List, Tuple
from uuid import uuid4

from ragdesk.models import Role, Turn

DEFAULT_MAX_PAIRS = 5


class SessionHistoryStore:
    """In-memory map of session id to its ordered turns.

    Every turn ever appended is kept, but :meth:`get_history` only returns the
    most recent ``max_pairs`` user/assistant pairs. Nothing expires; sessions
    live until the process exits.
    """

    def __init__(self, max_pairs: int = DEFAULT_MAX_PAIRS) -> None:
        if max_pairs <= 0:
            raise ValueError("max_pairs must be positive")
        self._max_pairs = max_pairs
        self._sessions: Dict[str, List[Turn]] = {}
        self._lock = threading.Lock()

    @property
    def max_pairs(self) -> int:
        return self._max_pairs

    def create(self, session_id: str | None = None) -> str:
        session_id = session_id or uuid4().hex
        with self._lock:
            self._sessions.setdefault(session_id, [])
        return session_id

    def exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_history(self, session_id: str) -> Tuple[Turn, ...]:
        with self._lock:
            turns = self._sessions.get(session_id)
            if not turns:
                return ()
            return tuple(turns[-(self._max_pairs * 2):])

    def turn_count(self, session_id: str) -> int:
        with self._lock:
            return len(self._sessions.get(session_id, ()))

    def append(self, session_id: str, role: Role, content: str) -> None:
        with self._lock:
            self._sessions.setdefault(session_id, []).append(Turn(role=Role(role), content=content))

    def record_exchange(self, session_id: str, question: str, reply: str) -> None:
        """Append the user turn and the assistant turn as one step."""

        with self._lock:
            turns = self._sessions.setdefault(session_id, [])
            turns.append(Turn(role=Role.USER, content=question))
            turns.append(Turn(role=Role.ASSISTANT, content=reply))

    def reset(self, session_id: str) -> bool:
        """Empty a session's turns; returns ``False`` if the id is unknown."""

        with self._lock:
            if session_id not in self._sessions:
                return False
            self._sessions[session_id] = []
            return True
