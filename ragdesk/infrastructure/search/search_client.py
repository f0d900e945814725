import logging
from typing import Any, Optional

import httpx

from ragdesk.core.exceptions import ConfigurationError, UpstreamError
from ragdesk.core.models.document import Document, SearchHit

logger = logging.getLogger(__name__)

SELECT_FIELDS = "id,documentId,filename,chunkIndex,content,pageNumber,section,fileType"


class SearchIndexClient:
    """Search backend over the Azure AI Search REST API."""

    def __init__(
        self,
        endpoint: Optional[str],
        api_key: Optional[str],
        index_name: Optional[str] = "documents",
        api_version: str = "2023-11-01",
        vector_field: str = "contentVector",
        timeout: float = 30.0,
    ):
        """Initialize search client.

        Args:
            endpoint: Service URL, e.g. https://<name>.search.windows.net.
            api_key: Admin or query key.
            index_name: Index holding the chunks.
            api_version: REST API version.
            vector_field: Vector field used by hybrid search.
            timeout: HTTP timeout in seconds.
        """
        self._endpoint = (endpoint or "").rstrip("/")
        self._api_key = api_key or ""
        self._index_name = index_name or ""
        self._api_version = api_version
        self._vector_field = vector_field
        self._timeout = timeout

    def _check_config(self) -> None:
        if not (self._endpoint and self._api_key and self._index_name):
            raise ConfigurationError(
                "Search configuration missing. Set SEARCH_ENDPOINT, "
                "SEARCH_API_KEY and SEARCH_INDEX_NAME."
            )

    def _url(self, action: str) -> str:
        return f"{self._endpoint}/indexes/{self._index_name}/docs/{action}"

    async def _post(self, action: str, body: dict[str, Any]) -> dict[str, Any]:
        self._check_config()
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._url(action),
                    params={"api-version": self._api_version},
                    headers={"api-key": self._api_key},
                    json=body,
                )
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Search {action} failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Search {action} failed: {e}") from e

    @staticmethod
    def _parse_hits(data: dict[str, Any]) -> list[SearchHit]:
        hits = []
        for item in data.get("value", []):
            score = float(item.get("@search.score") or 0.0)
            hits.append(SearchHit(document=Document.from_dict(item), score=score))
        return hits

    async def hybrid_search(
        self,
        query: str,
        vector: list[float],
        limit: int,
        filters: Optional[str] = None,
    ) -> list[SearchHit]:
        body: dict[str, Any] = {
            "search": query,
            "top": limit,
            "select": SELECT_FIELDS,
            "vectorQueries": [
                {
                    "kind": "vector",
                    "vector": vector,
                    "fields": self._vector_field,
                    "k": limit,
                }
            ],
        }
        if filters:
            body["filter"] = filters

        hits = self._parse_hits(await self._post("search", body))
        logger.debug(f"Hybrid search returned {len(hits)} hits")
        return hits

    async def text_search(
        self,
        query: str,
        limit: int,
        filters: Optional[str] = None,
    ) -> list[SearchHit]:
        body: dict[str, Any] = {
            "search": query,
            "top": limit,
            "select": SELECT_FIELDS,
            "searchMode": "any",
            "queryType": "simple",
        }
        if filters:
            body["filter"] = filters

        hits = self._parse_hits(await self._post("search", body))
        logger.debug(f"Text search returned {len(hits)} hits")
        return hits

    async def upload_documents(self, documents: list[dict]) -> None:
        if not documents:
            return
        actions = [{"@search.action": "mergeOrUpload", **doc} for doc in documents]
        data = await self._post("index", {"value": actions})

        failed = [r for r in data.get("value", []) if not r.get("status", True)]
        if failed:
            raise UpstreamError(
                f"{len(failed)}/{len(documents)} documents rejected by the index"
            )
        logger.info(f"Uploaded {len(documents)} documents to {self._index_name}")
