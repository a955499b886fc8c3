"""Result of one ingestion run."""

from typing import List

from pydantic import BaseModel, Field


class IngestionResult(BaseModel):
    """Summary returned by the ingestion pipeline."""

    file_name: str = Field(..., description="Basename of the ingested file")
    collection_name: str = Field(..., description="Destination collection")
    chunk_count: int = Field(..., ge=0, description="Number of chunks produced")
    uploaded_count: int = Field(..., ge=0, description="Number of points upserted")
    point_ids: List[str] = Field(default_factory=list, description="Upserted point ids, in chunk order")
    recreated: bool = Field(default=False, description="Whether the collection was (re)created")
