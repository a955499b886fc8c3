"""Upload of embedded chunks into Qdrant."""

from __future__ import annotations

import uuid
from typing import List, Optional

from qdrant_client.http.exceptions import UnexpectedResponse

from pdf_ingest.config import get_settings
from pdf_ingest.models.embedding import EmbeddedChunk
from pdf_ingest.models.point import ChunkPayload, UploadPoint
from pdf_ingest.services.qdrant_service import QdrantService
from pdf_ingest.utils.errors import InvalidConfigurationError, StoreUnavailableError, UploadError
from pdf_ingest.utils.logging import get_logger

logger = get_logger("upload_service")
settings = get_settings()

# Deterministic namespace for generating stable point IDs from (file_name, chunk_number)
_POINT_ID_NAMESPACE = uuid.UUID("6b9c7d68-4b93-4c9c-9d83-0b6c68dbb4d9")


def make_point_id(file_name: str, chunk_number: int) -> str:
    """Create a stable UUID point id for a chunk."""
    return str(uuid.uuid5(_POINT_ID_NAMESPACE, f"{file_name}:{chunk_number}"))


def build_points(file_name: str, embedded_chunks: List[EmbeddedChunk]) -> List[UploadPoint]:
    """Pair every embedded chunk with its payload and point id, keeping chunk order."""
    return [
        UploadPoint(
            id=make_point_id(file_name, ec.chunk.sequence_number),
            vector=ec.vector,
            payload=ChunkPayload(
                file_name=file_name,
                chunk_text=ec.chunk.text,
                chunk_number=ec.chunk.sequence_number,
            ),
        )
        for ec in embedded_chunks
    ]


def _rejection_reason(error: Exception) -> str:
    if isinstance(error, UnexpectedResponse):
        content = error.content.decode("utf-8", errors="replace") if error.content else ""
        return f"{error.status_code} {error.reason_phrase}: {content}".strip()
    return str(error)


class UploadService:
    """
    Upsert embedded chunks as points.

    Points are sent in batches of ``QDRANT_UPSERT_BATCH_SIZE`` (a whole
    document usually fits in one). Re-uploading the same file name overwrites
    the points of the previous run because point ids are derived from
    ``(file_name, chunk_number)``.
    """

    def __init__(self, store: QdrantService, batch_size: Optional[int] = None) -> None:
        batch_size = batch_size if batch_size is not None else settings.qdrant.upsert_batch_size
        if batch_size <= 0:
            raise InvalidConfigurationError("Upsert batch size must be > 0", field="batch_size", value=batch_size)
        self._store = store
        self._batch_size = batch_size

    async def upload(self, collection_name: str, file_name: str, embedded_chunks: List[EmbeddedChunk]) -> int:
        """Upsert embedded chunks; returns the number of points stored."""
        point_ids = await self.upload_points(collection_name, file_name, embedded_chunks)
        return len(point_ids)

    async def upload_points(
        self, collection_name: str, file_name: str, embedded_chunks: List[EmbeddedChunk]
    ) -> List[str]:
        """
        Upsert embedded chunks and return the stored point ids in chunk order.

        Raises:
            UploadError: If Qdrant rejects a batch; carries the ids stored
                before it, the ids of the rejected batch and the pending count
            StoreUnavailableError: If the connection to Qdrant is lost
        """
        points = build_points(file_name, embedded_chunks)
        if not points:
            return []

        logger.info(f"Uploading embeddings to Qdrant: collection={collection_name}, points={len(points)}")

        stored: List[str] = []
        for start in range(0, len(points), self._batch_size):
            batch = points[start : start + self._batch_size]
            batch_ids = [p.id for p in batch]
            try:
                await self._store.upsert_points(collection_name, batch)
            except StoreUnavailableError as e:
                e.details["uploaded"] = len(stored)
                raise
            except Exception as e:
                pending = len(points) - start - len(batch)
                reason = _rejection_reason(e)
                logger.error(
                    f"Qdrant rejected upsert batch: collection={collection_name}, "
                    f"uploaded={len(stored)}, failed={len(batch_ids)}, pending={pending} - {reason}"
                )
                raise UploadError(
                    f"Qdrant rejected {len(batch_ids)} point(s): {reason}",
                    collection=collection_name,
                    succeeded_point_ids=stored,
                    failed_point_ids=batch_ids,
                    pending_count=pending,
                    reason=reason,
                ) from e
            stored.extend(batch_ids)
            logger.debug(f"Upserted batch: collection={collection_name}, points={len(batch_ids)}, total={len(stored)}")

        logger.info(f"Qdrant upsert complete: collection={collection_name}, points={len(stored)}")
        return stored
