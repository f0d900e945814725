"""Candidate fetcher - fans a question out to several retrieval strategies."""

import asyncio
import logging
import re
from typing import Optional

from ..exceptions import ConfigurationError, RetrievalError
from ..models.document import SearchHit, dedupe_by_key
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_backend import SearchBackendProtocol
from .ranking_service import STOPWORDS

logger = logging.getLogger(__name__)

CAPITALIZED_RE = re.compile(r"\b[A-Z][A-Za-z0-9]+\b")
PARENTHETICAL_RE = re.compile(r"\b([A-Z][\w.-]*(?:\s+[A-Z][\w.-]*)*\s*\([^()]{1,60}\))")


def extract_entity_terms(
    question: str, acronyms: Optional[dict[str, str]] = None
) -> list[str]:
    """Pull proper-noun-looking terms out of a question.

    Parenthetical phrases ("NOR (Platform)") come first, then capitalized
    tokens of 2+ chars that are not stopwords, then acronym triggers.
    """
    terms: list[str] = []

    for match in PARENTHETICAL_RE.findall(question):
        terms.append(" ".join(match.split()))

    for token in CAPITALIZED_RE.findall(question):
        if token.lower() in STOPWORDS:
            continue
        terms.append(token)

    lowered = question.lower()
    for trigger, expansion in (acronyms or {}).items():
        if re.search(rf"\b{re.escape(trigger.lower())}\b", lowered):
            terms.append(expansion)

    seen: set[str] = set()
    unique = []
    for term in terms:
        if term.lower() in seen:
            continue
        seen.add(term.lower())
        unique.append(term)
    return unique


def build_entity_query(terms: list[str]) -> str:
    """OR together quoted phrases."""
    quoted = ['"' + t.replace('"', "") + '"' for t in terms]
    return " | ".join(quoted)


class CandidateFetcher:
    """Concurrent hybrid/text + entity retrieval with cross-source dedup."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        search_backend: SearchBackendProtocol,
        candidate_cap: int = 40,
        entity_cap: int = 10,
        acronyms: Optional[dict[str, str]] = None,
    ):
        """Initialize fetcher.

        Args:
            embedder: Embedding service for the query vector.
            search_backend: Search engine.
            candidate_cap: Hits requested from the primary strategy.
            entity_cap: Hits requested from entity search.
            acronyms: Lowercase trigger -> entity phrase expansions.
        """
        self._embedder = embedder
        self._search = search_backend
        self._candidate_cap = candidate_cap
        self._entity_cap = entity_cap
        self._acronyms = acronyms or {}

    async def _embed_query(self, question: str) -> Optional[list[float]]:
        try:
            vectors = await self._embedder.embed([question])
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning(f"Query embedding failed, skipping vector search: {e}")
            return None
        return vectors[0] if vectors else None

    async def _primary_search(
        self, question: str, vector: Optional[list[float]], cap: int
    ) -> list[SearchHit]:
        """Hybrid search, falling back to text search on failure."""
        if vector is not None:
            try:
                hits = await self._search.hybrid_search(question, vector, cap)
                logger.info(f"Hybrid search: {len(hits)} hits")
                return hits
            except ConfigurationError:
                raise
            except Exception as e:
                logger.warning(f"Hybrid search failed, falling back to text: {e}")

        try:
            hits = await self._search.text_search(question, cap)
        except ConfigurationError:
            raise
        except Exception as e:
            raise RetrievalError(f"Text search failed: {e}") from e

        logger.info(f"Text search: {len(hits)} hits")
        return hits

    async def _entity_search(self, terms: list[str]) -> list[SearchHit]:
        """Quoted-phrase search; failures yield no hits."""
        query = build_entity_query(terms)
        try:
            hits = await self._search.text_search(query, self._entity_cap)
        except Exception as e:
            logger.warning(f"Entity search failed for {query!r}: {e}")
            return []

        logger.info(f"Entity search {query!r}: {len(hits)} hits")
        return hits

    async def fetch(self, question: str, top: int = 5) -> list[SearchHit]:
        """Gather candidates from all applicable strategies.

        Args:
            question: User question.
            top: Caller's result cap; the primary strategy asks for at
                least `candidate_cap` so the ranker has room to work.

        Returns:
            Deduplicated hits, primary-strategy copies first.

        Raises:
            ConfigurationError: Search or embedding is misconfigured.
            RetrievalError: The primary strategy and its fallback both failed.
        """
        cap = max(top, self._candidate_cap)
        vector = await self._embed_query(question)

        tasks = [self._primary_search(question, vector, cap)]
        terms = extract_entity_terms(question, self._acronyms)
        if terms:
            tasks.append(self._entity_search(terms))

        results = await asyncio.gather(*tasks)

        flat = [hit for batch in results for hit in batch]
        unique = dedupe_by_key(flat)
        logger.info(
            f"Fetched {len(flat)} hits ({len(unique)} unique) for '{question[:50]}'"
        )
        return unique
