"""Point models uploaded to Qdrant."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ChunkPayload(BaseModel):
    """Payload stored with every point; enough to rebuild the original chunking."""

    file_name: str = Field(..., description="Basename of the source file")
    chunk_text: str = Field(..., description="Chunk text content")
    chunk_number: int = Field(..., ge=0, description="Chunk sequence number")


class UploadPoint(BaseModel):
    """A vector plus payload, keyed by a deterministic point id."""

    id: str = Field(..., description="UUID point id derived from (file_name, chunk_number)")
    vector: List[float] = Field(..., description="Embedding vector")
    payload: ChunkPayload = Field(..., description="Point payload")

    def payload_dict(self) -> Dict[str, Any]:
        return self.payload.model_dump()
