"""Ingestion pipeline: extract, chunk, reconcile, embed, upload."""

import uuid
from pathlib import Path
from typing import Optional

from pdf_ingest.config import PipelineConfig
from pdf_ingest.models.result import IngestionResult
from pdf_ingest.services.chunking_service import ChunkingService, validate_chunk_size
from pdf_ingest.services.collection_service import CollectionReconciler, ConfirmRecreate
from pdf_ingest.services.embedding_service import EmbeddingService
from pdf_ingest.services.parser_service import ParserService
from pdf_ingest.services.qdrant_service import QdrantService
from pdf_ingest.services.upload_service import UploadService
from pdf_ingest.utils.errors import EmptyInputError, InvalidConfigurationError
from pdf_ingest.utils.logging import get_logger, set_run_id

logger = get_logger("ingestion_pipeline")

_DEBUG_PREVIEW_VALUES = 8


class IngestionPipeline:
    """
    Ingest one document into a Qdrant collection.

    Processing pipeline:
    1. Validate the run configuration (before any I/O)
    2. Extract text from the document
    3. Chunk text
    4. Reconcile the collection (create / recreate)
    5. Generate embeddings
    6. Upsert points

    Each stage runs to completion before the next one starts, and any error
    stops the run.
    """

    def __init__(
        self,
        store: Optional[QdrantService] = None,
        parser_service: Optional[ParserService] = None,
        chunking_service: Optional[ChunkingService] = None,
        embedding_service: Optional[EmbeddingService] = None,
        upload_service: Optional[UploadService] = None,
        confirm_recreate: Optional[ConfirmRecreate] = None,
    ):
        self.store = store or QdrantService()
        self.parser_service = parser_service or ParserService()
        self.chunking_service = chunking_service or ChunkingService()
        self.embedding_service = embedding_service or EmbeddingService()
        self.upload_service = upload_service or UploadService(self.store)
        self.reconciler = CollectionReconciler(self.store, confirm_recreate=confirm_recreate)

    @staticmethod
    def validate_config(config: PipelineConfig) -> None:
        """Raise InvalidConfigurationError for a configuration that cannot run."""
        validate_chunk_size(config.chunk_size)
        if not config.collection_name or not config.collection_name.strip():
            raise InvalidConfigurationError(
                "Collection name cannot be empty", field="collection_name", value=config.collection_name
            )
        if config.vector_size <= 0:
            raise InvalidConfigurationError(
                "Vector size must be > 0", field="vector_size", value=config.vector_size
            )

    async def run(self, path: str, config: PipelineConfig) -> IngestionResult:
        """
        Run the full pipeline for the document at path.

        Args:
            path: Path to the source document
            config: Run configuration

        Returns:
            IngestionResult with the number of points upserted

        Raises:
            IngestionException: Any pipeline error; nothing is retried here
        """
        set_run_id(uuid.uuid4().hex[:8])
        self.validate_config(config)
        if config.vector_size != self.embedding_service.dimension:
            raise InvalidConfigurationError(
                f"Vector size {config.vector_size} does not match the embedding dimension "
                f"{self.embedding_service.dimension} of {self.embedding_service.model_name}",
                field="vector_size",
                value=config.vector_size,
            )

        file_name = Path(path).name
        logger.info(
            f"Ingesting document: file={file_name}, collection={config.collection_name}, "
            f"chunk_size={config.chunk_size}, recreate={config.force_recreate}"
        )

        document = await self.parser_service.parse_file(path)
        logger.info(f"Extracted text from file: {path}, chars={len(document.text)}")
        if config.debug:
            logger.debug(f"Extracted text:\n{document.text}")

        chunks = await self.chunking_service.chunk_text(
            document.text, max_tokens=config.chunk_size, file_name=file_name
        )
        if not chunks:
            raise EmptyInputError(path=path)
        logger.info(f"Created {len(chunks)} chunks (chunk_size={config.chunk_size})")
        if config.debug:
            for chunk in chunks:
                logger.debug(f"Chunk {chunk.sequence_number} ({chunk.token_count} tokens): {chunk.text!r}")

        await self.store.check_connection()
        descriptor = await self.reconciler.ensure_collection(
            config.collection_name, config.vector_size, recreate=config.force_recreate
        )

        embedded = await self.embedding_service.embed_chunks(chunks)
        logger.info(f"Embedded {len(embedded)} chunks")
        if config.debug:
            for ec in embedded:
                preview = ", ".join(f"{v:.4f}" for v in ec.vector[:_DEBUG_PREVIEW_VALUES])
                logger.debug(f"Embedding {ec.chunk.sequence_number} (dim={ec.dimension}): [{preview}, ...]")

        point_ids = await self.upload_service.upload_points(config.collection_name, file_name, embedded)
        logger.info(f"Uploaded {len(point_ids)} embeddings to collection {config.collection_name}")

        return IngestionResult(
            file_name=file_name,
            collection_name=config.collection_name,
            chunk_count=len(chunks),
            uploaded_count=len(point_ids),
            point_ids=point_ids,
            recreated=descriptor.created,
        )
