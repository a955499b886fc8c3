"""pdf-ingest: chunk, embed and upload documents into a Qdrant collection."""

__version__ = "0.1.0"
