"""Core business services."""
from .intent_service import IntentClassifier
from .fetch_service import CandidateFetcher
from .ranking_service import DocumentRanker
from .relevance_service import RelevanceFilter
from .snippet_service import SnippetBuilder
from .answer_service import AnswerComposer
from .chat_service import ChatService
from .search_service import SearchService
from .ingest_service import IngestService

__all__ = [
    "IntentClassifier",
    "CandidateFetcher",
    "DocumentRanker",
    "RelevanceFilter",
    "SnippetBuilder",
    "AnswerComposer",
    "ChatService",
    "SearchService",
    "IngestService",
]
