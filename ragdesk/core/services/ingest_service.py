"""Ingest service - parse, chunk, embed and upload documents."""

import asyncio
import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..exceptions import ConfigurationError
from ..models.ingest import Chunk, IngestItemResult, IngestReport
from ..protocols.embedder import EmbedderProtocol
from ..protocols.search_backend import SearchBackendProtocol

logger = logging.getLogger(__name__)

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class IngestService:
    """Service for indexing documents into the search backend."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        search_backend: SearchBackendProtocol,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        chunk_min_chars: int = 50,
        batch_size: int = 50,
        loader=None,
    ):
        """Initialize ingest service.

        Args:
            embedder: Embedding service.
            search_backend: Index to upload into.
            chunk_size: Target chunk size in characters.
            chunk_overlap: Characters shared between neighbouring chunks.
            chunk_min_chars: Chunks this short or shorter are dropped.
            batch_size: Documents per upload call.
            loader: Document parser; defaults to the composite loader.
        """
        self._embedder = embedder
        self._search = search_backend
        self._chunk_size = chunk_size
        self._chunk_overlap = min(chunk_overlap, chunk_size // 2)
        self._chunk_min_chars = chunk_min_chars
        self._batch_size = batch_size
        self._loader = loader

    @property
    def loader(self):
        """Lazy load document loader."""
        if self._loader is None:
            from ragdesk.infrastructure.document_loaders import CompositeLoader

            self._loader = CompositeLoader()
        return self._loader

    def _compute_hash(self, content: str) -> str:
        """Compute content hash."""
        return hashlib.md5(content.encode()).hexdigest()[:12]

    def _merge(self, pieces: list[str], sep: str) -> list[str]:
        """Pack pieces into chunks, carrying a tail of each into the next."""
        chunks = []
        window: list[str] = []
        total = 0

        for piece in pieces:
            joined = len(piece) + (len(sep) if window else 0)
            if window and total + joined > self._chunk_size:
                chunks.append(sep.join(window))
                while window and (
                    total > self._chunk_overlap or total + joined > self._chunk_size
                ):
                    total -= len(window[0]) + (len(sep) if len(window) > 1 else 0)
                    window.pop(0)
                joined = len(piece) + (len(sep) if window else 0)
            window.append(piece)
            total += joined

        if window:
            chunks.append(sep.join(window))
        return chunks

    def _split(self, text: str, separators: list[str]) -> list[str]:
        sep, rest = separators[-1], []
        for i, candidate in enumerate(separators):
            if candidate == "" or candidate in text:
                sep, rest = candidate, separators[i + 1:]
                break

        pieces = list(text) if sep == "" else [p for p in text.split(sep) if p.strip()]

        result: list[str] = []
        small: list[str] = []
        for piece in pieces:
            if len(piece) <= self._chunk_size:
                small.append(piece)
                continue
            if small:
                result.extend(self._merge(small, sep))
                small = []
            if rest:
                result.extend(self._split(piece, rest))
            else:
                result.append(piece)
        if small:
            result.extend(self._merge(small, sep))
        return result

    def chunk_text(self, text: str) -> list[str]:
        """Split text on paragraph, line, sentence and word boundaries.

        Args:
            text: Text to chunk.

        Returns:
            Trimmed chunks longer than the minimum.
        """
        chunks = (c.strip() for c in self._split(text, SEPARATORS))
        return [c for c in chunks if len(c) > self._chunk_min_chars]

    def _to_index_document(
        self, chunk: Chunk, vector: list[float], uploaded_at: str
    ) -> dict:
        return {
            "id": chunk.id,
            "documentId": chunk.document_id,
            "filename": chunk.filename,
            "chunkIndex": chunk.chunk_index,
            "content": chunk.content,
            "chunkSize": len(chunk.content),
            "fileType": chunk.file_type,
            "uploadDate": uploaded_at,
            "contentVector": vector,
        }

    async def ingest_text(
        self, filename: str, text: str, file_type: str = "text"
    ) -> IngestItemResult:
        """Chunk, embed and upload already-extracted text."""
        document_id = self._compute_hash(f"{filename}\n{text}")
        pieces = self.chunk_text(text)
        if not pieces:
            return IngestItemResult(
                filename=filename, success=False, error="No text content extracted"
            )

        chunks = [
            Chunk(document_id, filename, file_type, i, piece)
            for i, piece in enumerate(pieces)
        ]
        uploaded_at = datetime.now(timezone.utc).isoformat()

        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i:i + self._batch_size]
            vectors = await self._embedder.embed([c.content for c in batch])
            await self._search.upload_documents(
                [self._to_index_document(c, v, uploaded_at) for c, v in zip(batch, vectors)]
            )
            logger.info(f"Indexed {filename}: {i + len(batch)}/{len(chunks)} chunks")

        return IngestItemResult(
            filename=filename,
            success=True,
            chunks=len(chunks),
            document_id=document_id,
        )

    async def ingest_file(self, path: Path) -> IngestItemResult:
        text = await asyncio.to_thread(self.loader.load, path)
        file_type = path.suffix.lower().lstrip(".") or "text"
        return await self.ingest_text(path.name, text, file_type)

    async def ingest_files(self, paths: list[str]) -> IngestReport:
        """Index several files, isolating per-file failures.

        Raises:
            ConfigurationError: Embedding or search is not configured.
        """
        report = IngestReport()

        for raw in paths:
            path = Path(raw)
            try:
                item = await self.ingest_file(path)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.error(f"Failed to ingest {path.name}: {e}")
                item = IngestItemResult(filename=path.name, success=False, error=str(e))
            report.items.append(item)

        ok = sum(1 for item in report.items if item.success)
        logger.info(
            f"Ingest complete: {ok}/{len(report.items)} files, "
            f"{report.total_chunks} chunks"
        )
        return report

    async def ingest_directory(self, docs_path: str, pattern: Optional[str] = None) -> IngestReport:
        """Index every supported file in a folder."""
        root = Path(docs_path)
        if not root.exists():
            logger.error(f"Docs path not found: {root}")
            return IngestReport()

        files = sorted(p for p in root.glob(pattern or "*") if p.is_file() and self.loader.supports(p))
        return await self.ingest_files([str(p) for p in files])
