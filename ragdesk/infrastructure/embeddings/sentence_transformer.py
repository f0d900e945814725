import asyncio
import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

from ragdesk.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        batch_size: int = 10,
    ):
        self._model_name = model_name
        self._batch_size = max(1, batch_size)

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        try:
            return SentenceTransformer(self._model_name)
        except OSError as e:
            raise ConfigurationError(
                f"Embedding model '{self._model_name}' could not be loaded: {e}"
            ) from e

    def warmup(self) -> None:
        _ = self.model
        logger.info("Embedding model warmed up")

    def encode(self, texts: list[str]) -> np.ndarray:
        return self.model.encode(
            texts, batch_size=self._batch_size, convert_to_numpy=True
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = texts[i:i + self._batch_size]
            encoded = await asyncio.to_thread(self.encode, batch)
            vectors.extend(encoded.tolist())
        return vectors
