"""Builders and fakes shared by the test modules."""
from typing import Optional
from unittest.mock import AsyncMock

from ragdesk.core.models.document import Document, ScoredCandidate, SearchHit


def make_hit(
    filename: str,
    content: str,
    score: float = 1.0,
    id: Optional[str] = None,
    **kwargs,
) -> SearchHit:
    return SearchHit(
        document=Document(filename=filename, content=content, id=id, **kwargs),
        score=score,
    )


def make_candidate(
    filename: str,
    content: str,
    score: float = 1.0,
    adjusted: Optional[float] = None,
    id: Optional[str] = None,
) -> ScoredCandidate:
    return ScoredCandidate(
        hit=make_hit(filename, content, score, id),
        adjusted_score=score if adjusted is None else adjusted,
    )


def prose(n_words: int, word: str = "lorem") -> str:
    return " ".join(f"{word}{i}" for i in range(n_words))


def fake_search_backend(hybrid=None, text=None) -> AsyncMock:
    backend = AsyncMock()
    backend.hybrid_search = AsyncMock(return_value=hybrid or [])
    backend.text_search = AsyncMock(return_value=text or [])
    backend.upload_documents = AsyncMock(return_value=None)
    return backend


def fake_embedder(dim: int = 3) -> AsyncMock:
    embedder = AsyncMock()
    embedder.embed = AsyncMock(side_effect=lambda texts: [[0.1] * dim for _ in texts])
    return embedder
