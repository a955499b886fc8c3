"""Chunk models for document ingestion."""

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """A bounded, contiguous span of source text produced by the chunking service."""

    file_name: str = Field(..., description="Basename of the source file")
    sequence_number: int = Field(..., ge=0, description="0-based position of this chunk in emission order")
    text: str = Field(..., min_length=1, description="Chunk text content")
    token_count: int = Field(..., ge=0, description="Token count of the chunk text")
