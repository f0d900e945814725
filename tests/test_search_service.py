"""Tests for the raw search service."""

import pytest

from ragdesk.core.exceptions import ConfigurationError, UpstreamError
from ragdesk.core.services.search_service import SearchService

from tests.fakes import fake_embedder, fake_search_backend, make_hit

HITS = [make_hit("policy.pdf", "Vacation policy", 2.5, id="p-0", page_number=3)]


class TestSearchService:
    """Test validation, modes and error shapes."""

    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_query_required(self, query):
        service = SearchService(fake_embedder(), fake_search_backend())
        assert await service.search(query) == {
            "success": False,
            "error": "Query parameter is required",
        }

    async def test_unknown_mode(self):
        service = SearchService(fake_embedder(), fake_search_backend())
        result = await service.search("vacation", mode="semantic")
        assert result["success"] is False

    async def test_hybrid(self):
        embedder = fake_embedder()
        backend = fake_search_backend(hybrid=HITS)

        result = await SearchService(embedder, backend).search(" vacation ", top=3)

        assert result["success"]
        assert result["query"] == "vacation"
        assert result["topK"] == 3
        assert result["searchMode"] == "hybrid"
        assert result["resultsCount"] == 1
        assert result["results"][0]["document"]["pageNumber"] == 3
        embedder.embed.assert_awaited_once_with(["vacation"])
        backend.hybrid_search.assert_awaited_once_with("vacation", [0.1, 0.1, 0.1], 3)

    async def test_text_mode_skips_embedding(self):
        embedder = fake_embedder()
        backend = fake_search_backend(text=HITS)

        result = await SearchService(embedder, backend).search("vacation", mode="text")

        assert result["searchMode"] == "text"
        embedder.embed.assert_not_called()
        backend.text_search.assert_awaited_once_with("vacation", 5)

    async def test_top_clamped(self):
        backend = fake_search_backend()
        result = await SearchService(fake_embedder(), backend, max_top=50).search(
            "vacation", top=500, mode="text"
        )
        assert result["topK"] == 50

    async def test_configuration_error_message(self):
        backend = fake_search_backend()
        backend.hybrid_search.side_effect = ConfigurationError("Search configuration missing.")

        result = await SearchService(fake_embedder(), backend).search("vacation")

        assert result == {"success": False, "error": "Search configuration missing."}

    async def test_upstream_error_is_generic(self):
        backend = fake_search_backend()
        backend.hybrid_search.side_effect = UpstreamError("HTTP 503", status_code=503)

        result = await SearchService(fake_embedder(), backend).search("vacation")

        assert result == {"success": False, "error": "Failed to search documents"}
