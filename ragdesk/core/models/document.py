"""Document domain models."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

T = TypeVar("T")


class SourceCategory(Enum):
    """Where a chunk most likely came from."""
    AUTHORITATIVE = "authoritative"  # policies, handbooks, reference docs
    TRACKER = "tracker"              # issue-tracker exports and tickets
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Document:
    """Indexed chunk as returned by the search backend."""
    filename: str
    content: str
    id: Optional[str] = None
    chunk_index: int = 0
    page_number: Optional[int] = None
    section: Optional[str] = None
    file_type: Optional[str] = None

    @property
    def identity_key(self) -> str:
        """Dedup key, stable across retrieval sources."""
        if self.id:
            return self.id
        return f"{self.filename}{self.content[:100]}"

    @property
    def extension(self) -> str:
        if self.file_type:
            return self.file_type.lower().lstrip(".")
        if "." in self.filename:
            return self.filename.rsplit(".", 1)[1].lower()
        return ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        return cls(
            id=data.get("id"),
            filename=data.get("filename") or "unknown",
            content=data.get("content") or "",
            chunk_index=int(data.get("chunkIndex") or 0),
            page_number=data.get("pageNumber"),
            section=data.get("section"),
            file_type=data.get("fileType"),
        )


@dataclass(frozen=True)
class SearchHit:
    """Scored document from one retrieval strategy."""
    document: Document
    score: float

    @property
    def identity_key(self) -> str:
        return self.document.identity_key

    def to_dict(self) -> dict[str, Any]:
        doc = self.document
        return {
            "score": self.score,
            "document": {
                "id": doc.id,
                "filename": doc.filename,
                "chunkIndex": doc.chunk_index,
                "pageNumber": doc.page_number,
                "section": doc.section,
                "content": doc.content,
            },
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """SearchHit with ranking flags, computed once by the ranker."""
    hit: SearchHit
    adjusted_score: float
    category: SourceCategory = SourceCategory.UNKNOWN
    has_url: bool = False
    has_ip: bool = False
    has_exact_match: bool = False
    is_compact_record: bool = False

    @property
    def document(self) -> Document:
        return self.hit.document

    @property
    def score(self) -> float:
        return self.hit.score

    @property
    def identity_key(self) -> str:
        return self.hit.identity_key

    @property
    def is_penalized_source(self) -> bool:
        return self.category is SourceCategory.TRACKER

    @property
    def has_endpoint(self) -> bool:
        return self.has_url or self.has_ip


@dataclass(frozen=True)
class Snippet:
    """Citable excerpt; `id` is the only token the LLM may cite."""
    id: int
    filename: str
    text: str
    page: Optional[int] = None
    section: Optional[str] = None
    score: float = 0.0

    @property
    def header(self) -> str:
        parts = [self.filename]
        if self.page is not None:
            parts.append(f"p{self.page}")
        if self.section:
            parts.append(f"§{self.section}")
        return f"[#{self.id}] ({' '.join(parts)})"

    def preview(self, length: int = 200) -> str:
        if len(self.text) <= length:
            return self.text
        return self.text[:length] + "..."


def dedupe_by_key(items: Iterable[T]) -> list[T]:
    """Drop repeated identity keys; first occurrence wins."""
    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        key = item.identity_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique
