"""Session store protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.chat import ConversationTurn


@runtime_checkable
class SessionStoreProtocol(Protocol):
    """Protocol for session-keyed conversation history."""

    async def get(self, session_id: str) -> list[ConversationTurn]:
        """Return a copy of the session's turns, oldest first."""
        ...

    async def append(self, session_id: str, turn: ConversationTurn) -> None:
        """Append a turn, evicting the oldest while over cap."""
        ...

    async def evict_oldest(self, session_id: str, count: int = 1) -> int:
        """Drop up to `count` oldest turns, return how many were dropped."""
        ...

    async def clear(self, session_id: str) -> None:
        """Forget a session."""
        ...
