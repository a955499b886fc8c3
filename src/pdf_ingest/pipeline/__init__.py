"""Ingestion pipeline orchestration."""

from pdf_ingest.pipeline.ingestion_pipeline import IngestionPipeline

__all__ = ["IngestionPipeline"]
