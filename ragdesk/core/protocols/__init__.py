"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .search_backend import SearchBackendProtocol
from .llm import LLMProtocol
from .session_store import SessionStoreProtocol

__all__ = [
    "EmbedderProtocol",
    "SearchBackendProtocol",
    "LLMProtocol",
    "SessionStoreProtocol",
]
