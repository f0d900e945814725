"""Intent routing models."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Intent(Enum):
    """Question category decided before retrieval."""
    GREETING = "greeting"
    META_QUESTION = "meta_question"
    OUT_OF_SCOPE = "out_of_scope"
    DOCUMENT_QUESTION = "document_question"


@dataclass(frozen=True)
class IntentRule:
    """Ordered rule: first matching pattern decides the intent."""
    name: str
    pattern: re.Pattern
    intent: Intent


@dataclass(frozen=True)
class IntentResult:
    """Classification outcome; canned response for short-circuit intents."""
    intent: Intent
    response: Optional[str] = None
    matched_rule: Optional[str] = None

    @property
    def short_circuits(self) -> bool:
        return self.intent is not Intent.DOCUMENT_QUESTION
