"""Embedding generation service (fastembed)."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

from fastembed import TextEmbedding
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from pdf_ingest.config import get_settings
from pdf_ingest.models.chunk import Chunk
from pdf_ingest.models.embedding import EmbeddedChunk
from pdf_ingest.utils.errors import EmbeddingError
from pdf_ingest.utils.logging import get_logger

logger = get_logger("embedding_service")
settings = get_settings()


class EmbeddingService:
    """
    Generate embeddings for text chunks with a local fastembed model.

    ``embed`` is the call boundary to the model; it is retried with
    ``EMBEDDING_MAX_RETRIES`` attempts (1 by default, i.e. no retry).
    ``embed_chunks`` batches chunks through ``embed`` and never retries
    on its own: any failure aborts the whole run.
    """

    def __init__(
        self,
        model: Optional[Any] = None,
        model_name: Optional[str] = None,
        dimension: Optional[int] = None,
        batch_size: Optional[int] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        self._model = model  # lazy unless injected
        self._model_name = model_name or settings.embedding.model_name
        self._dimension = dimension or settings.embedding.dimension
        self._batch_size = max(1, batch_size or settings.embedding.batch_size)
        self._max_retries = max(1, max_retries or settings.embedding.max_retries)

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimension(self) -> int:
        return self._dimension

    def _get_model(self):
        """Load the fastembed model (downloads it on first use)."""
        if self._model is not None:
            return self._model

        logger.info(f"Loading embedding model: {self._model_name}")
        try:
            self._model = TextEmbedding(
                model_name=self._model_name,
                cache_dir=settings.embedding.embedding_cache_dir,
                threads=settings.embedding.embedding_threads,
            )
        except Exception as e:
            raise EmbeddingError(f"Failed to load embedding model: {e}", model=self._model_name) from e
        return self._model

    def _embed_batch(self, inputs: List[str]) -> List[List[float]]:
        """Embed one batch of texts."""
        model = self._get_model()
        try:
            return [[float(x) for x in vector] for vector in model.embed(inputs, batch_size=len(inputs))]
        except Exception as e:
            raise EmbeddingError(f"Embedding request failed: {e}", model=self._model_name) from e

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Embed texts, preserving order.

        Raises:
            EmbeddingError: If the model fails after all attempts
        """
        if not texts:
            return []
        async for attempt in AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=30),
            retry=retry_if_exception_type(EmbeddingError),
        ):
            with attempt:
                return await asyncio.to_thread(self._embed_batch, texts)
        # unreachable due to reraise=True, but keeps type checkers happy
        raise EmbeddingError("Embedding retries exhausted", model=self._model_name)

    async def embed_chunks(self, chunks: List[Chunk]) -> List[EmbeddedChunk]:
        """
        Embed chunks in batches.

        Args:
            chunks: Chunks in sequence order

        Returns:
            One EmbeddedChunk per input chunk, same order

        Raises:
            EmbeddingError: If any batch fails or returns vectors of the wrong
                count or dimension
        """
        if not chunks:
            return []

        logger.info(
            f"Generating embeddings: model={self._model_name}, "
            f"chunks={len(chunks)}, batch_size={self._batch_size}"
        )

        out: List[EmbeddedChunk] = []
        for start in range(0, len(chunks), self._batch_size):
            batch_chunks = chunks[start : start + self._batch_size]
            vectors = await self.embed([c.text for c in batch_chunks])

            if len(vectors) != len(batch_chunks):
                raise EmbeddingError(
                    "Embedding response size mismatch",
                    model=self._model_name,
                    details={"expected": len(batch_chunks), "got": len(vectors), "batch_start": start},
                )

            for chunk, vector in zip(batch_chunks, vectors):
                if len(vector) != self._dimension:
                    raise EmbeddingError(
                        "Embedding dimension mismatch",
                        model=self._model_name,
                        details={
                            "expected_dimension": self._dimension,
                            "actual_dimension": len(vector),
                            "chunk_number": chunk.sequence_number,
                        },
                    )
                out.append(EmbeddedChunk(chunk=chunk, vector=vector))

        logger.info(f"Embeddings generated successfully: count={len(out)}, dimension={self._dimension}")
        return out
