"""Collection models."""

from pydantic import BaseModel, Field
from qdrant_client.models import Distance


class CollectionDescriptor(BaseModel):
    """Shape of the destination collection once reconciliation has run."""

    name: str = Field(..., description="Collection name")
    vector_size: int = Field(..., gt=0, description="Vector dimension; must match the embedding model")
    distance: Distance = Field(default=Distance.COSINE, description="Distance metric")
    created: bool = Field(default=False, description="Whether this run created (or recreated) the collection")
