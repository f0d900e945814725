import asyncio
import logging

from ragdesk.core.models.chat import ConversationTurn, Session

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Process-local conversation history, one lock per session id.

    State is lost on restart. Session ids are not authenticated.
    """

    def __init__(self, max_turns: int = 10):
        self._max_turns = max_turns
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    async def get(self, session_id: str) -> list[ConversationTurn]:
        async with self._lock(session_id):
            session = self._sessions.get(session_id)
            return list(session.turns) if session else []

    async def append(self, session_id: str, turn: ConversationTurn) -> None:
        async with self._lock(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                session = self._sessions[session_id] = Session(
                    session_id=session_id, max_turns=self._max_turns
                )
            session.add(turn)

    async def evict_oldest(self, session_id: str, count: int = 1) -> int:
        async with self._lock(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                return 0
            return len(session.evict_oldest(count))

    async def clear(self, session_id: str) -> None:
        # The lock outlives the session so waiters and new callers share it.
        async with self._lock(session_id):
            self._sessions.pop(session_id, None)
        logger.info(f"Session {session_id} cleared")

    def __len__(self) -> int:
        return len(self._sessions)
