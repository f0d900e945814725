"""Search service - raw retrieval without answer generation."""

import logging
from typing import Any

from ..exceptions import ConfigurationError
from ..models.answer import error_response
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_backend import SearchBackendProtocol

logger = logging.getLogger(__name__)

SEARCH_MODES = ("hybrid", "text")


class SearchService:
    """Direct hybrid or text search over the index."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        search_backend: SearchBackendProtocol,
        max_top: int = 50,
    ):
        self._embedder = embedder
        self._search = search_backend
        self._max_top = max_top

    async def search(
        self, query: str, top: int = 5, mode: str = "hybrid"
    ) -> dict[str, Any]:
        """Search documents.

        Args:
            query: Search text.
            top: Number of results.
            mode: "hybrid" or "text".

        Returns:
            Response dict with the hits, or the error shape.
        """
        if not query or not query.strip():
            return error_response("Query parameter is required")
        if mode not in SEARCH_MODES:
            return error_response(f"Unknown search mode: {mode}")

        query = query.strip()
        top = max(1, min(self._max_top, top))

        try:
            if mode == "hybrid":
                vector = (await self._embedder.embed([query]))[0]
                hits = await self._search.hybrid_search(query, vector, top)
            else:
                hits = await self._search.text_search(query, top)
        except ConfigurationError as e:
            logger.error(f"Search not configured: {e}")
            return error_response(str(e))
        except Exception as e:
            logger.error(f"Search error: {e}")
            return error_response("Failed to search documents")

        logger.info(f"Search ({mode}): {len(hits)} hits for '{query[:50]}'")
        return {
            "success": True,
            "query": query,
            "topK": top,
            "searchMode": mode,
            "resultsCount": len(hits),
            "results": [hit.to_dict() for hit in hits],
        }
