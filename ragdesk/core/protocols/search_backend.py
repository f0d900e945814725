"""Search backend protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import SearchHit


@runtime_checkable
class SearchBackendProtocol(Protocol):
    """Protocol for the full-text / vector search engine.

    "No results" is an empty list; only transport or configuration
    failures raise.
    """

    async def hybrid_search(
        self,
        query: str,
        vector: list[float],
        limit: int,
        filters: Optional[str] = None,
    ) -> list[SearchHit]:
        """Search combining lexical and vector scoring.

        Args:
            query: Search text.
            vector: Query embedding.
            limit: Maximum number of hits.
            filters: Backend filter expression.

        Returns:
            Hits sorted by backend score.
        """
        ...

    async def text_search(
        self,
        query: str,
        limit: int,
        filters: Optional[str] = None,
    ) -> list[SearchHit]:
        """Lexical search only."""
        ...

    async def upload_documents(self, documents: list[dict]) -> None:
        """Merge-or-upload index documents."""
        ...
