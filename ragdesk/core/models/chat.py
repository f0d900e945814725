"""Conversation domain models."""
import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConversationTurn:
    """Single conversation turn."""
    role: str  # "user" | "assistant"
    content: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class Session:
    """Rolling history for one session id, FIFO-truncated."""
    session_id: str
    turns: list[ConversationTurn] = field(default_factory=list)
    max_turns: int = 10

    def add(self, turn: ConversationTurn) -> None:
        """Append turn, evicting from the front while over cap."""
        self.turns.append(turn)
        while len(self.turns) > self.max_turns:
            self.turns.pop(0)

    def evict_oldest(self, count: int = 1) -> list[ConversationTurn]:
        evicted = self.turns[:count]
        del self.turns[:count]
        return evicted
