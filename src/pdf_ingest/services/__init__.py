"""Services package."""

from pdf_ingest.services.chunking_service import ChunkingService
from pdf_ingest.services.collection_service import CollectionReconciler
from pdf_ingest.services.embedding_service import EmbeddingService
from pdf_ingest.services.parser_service import ParserService
from pdf_ingest.services.qdrant_service import QdrantService
from pdf_ingest.services.upload_service import UploadService

__all__ = [
    "ChunkingService",
    "CollectionReconciler",
    "EmbeddingService",
    "ParserService",
    "QdrantService",
    "UploadService",
]
