"""Domain models."""
from .document import (
    Document,
    SearchHit,
    ScoredCandidate,
    Snippet,
    SourceCategory,
    dedupe_by_key,
)
from .chat import ConversationTurn, Session
from .intent import Intent, IntentResult, IntentRule
from .answer import AnswerRequest, AnswerResponse, ComposedAnswer, Source
from .ingest import Chunk, IngestItemResult, IngestReport

__all__ = [
    "Document",
    "SearchHit",
    "ScoredCandidate",
    "Snippet",
    "SourceCategory",
    "dedupe_by_key",
    "ConversationTurn",
    "Session",
    "Intent",
    "IntentResult",
    "IntentRule",
    "AnswerRequest",
    "AnswerResponse",
    "ComposedAnswer",
    "Source",
    "Chunk",
    "IngestItemResult",
    "IngestReport",
]
