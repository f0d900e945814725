"""Ingestion domain models."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Chunk:
    """Document chunk for indexing."""
    document_id: str
    filename: str
    file_type: str
    chunk_index: int
    content: str

    @property
    def id(self) -> str:
        return f"{self.document_id}-{self.chunk_index}"


@dataclass
class IngestItemResult:
    """Outcome for one file."""
    filename: str
    success: bool
    chunks: int = 0
    document_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filename": self.filename,
            "success": self.success,
            "chunks": self.chunks,
        }
        if self.document_id:
            data["documentId"] = self.document_id
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class IngestReport:
    """Multi-file outcome; succeeds when at least one file did."""
    items: list[IngestItemResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return any(item.success for item in self.items)

    @property
    def total_chunks(self) -> int:
        return sum(item.chunks for item in self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "totalChunks": self.total_chunks,
            "files": [item.to_dict() for item in self.items],
        }
