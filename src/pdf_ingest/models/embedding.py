"""Embedding models for document ingestion."""

from typing import List

from pydantic import BaseModel, Field

from pdf_ingest.models.chunk import Chunk


class EmbeddedChunk(BaseModel):
    """A chunk paired with its embedding vector."""

    chunk: Chunk = Field(..., description="Source chunk")
    vector: List[float] = Field(..., description="Embedding vector")

    @property
    def dimension(self) -> int:
        return len(self.vector)
