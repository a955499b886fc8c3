"""Collection reconciliation."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from qdrant_client.models import Distance

from pdf_ingest.models.collection import CollectionDescriptor
from pdf_ingest.services.qdrant_service import QdrantService
from pdf_ingest.utils.errors import CollectionError, InvalidConfigurationError, StoreUnavailableError
from pdf_ingest.utils.logging import get_logger

logger = get_logger("collection_service")

ConfirmRecreate = Callable[[str], bool]


class CollectionReconciler:
    """
    Make the destination collection exist before any upload.

    - absent: create it with the requested vector size and cosine distance
    - present and ``recreate``: delete it, then create it again
    - present otherwise: leave it alone

    The vector size of an existing collection that is kept is not checked;
    a mismatch is reported by Qdrant at upload time.
    """

    def __init__(self, store: QdrantService, confirm_recreate: Optional[ConfirmRecreate] = None) -> None:
        self._store = store
        self._confirm_recreate = confirm_recreate

    async def ensure_collection(self, name: str, vector_size: int, recreate: bool = False) -> CollectionDescriptor:
        """
        Ensure the collection is ready for upload.

        Args:
            name: Collection name
            vector_size: Embedding dimension
            recreate: Delete and recreate the collection if it already exists

        Returns:
            CollectionDescriptor; ``created`` is True when this call created it

        Raises:
            InvalidConfigurationError: If name is empty or vector_size is not positive
            StoreUnavailableError: If Qdrant cannot be reached
            CollectionError: If Qdrant rejects the create/delete
        """
        if not name or not name.strip():
            raise InvalidConfigurationError("Collection name cannot be empty", field="collection_name", value=name)
        if vector_size <= 0:
            raise InvalidConfigurationError("Vector size must be > 0", field="vector_size", value=vector_size)

        descriptor = CollectionDescriptor(name=name, vector_size=vector_size, distance=Distance.COSINE)

        try:
            exists = await self._store.collection_exists(name)
            if exists:
                logger.info(f"Collection {name} already exists")
                if recreate and self._confirm_recreate is not None:
                    # the callback may block on a terminal prompt
                    if not await asyncio.to_thread(self._confirm_recreate, name):
                        logger.info(f"Collection {name} will not be cleared")
                        recreate = False
                if not recreate:
                    return descriptor
                logger.info(f"Clearing collection {name}...")
                await self._store.delete_collection(name)

            await self._store.create_collection(name, vector_size, descriptor.distance)
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise CollectionError(
                f"Failed to reconcile Qdrant collection: {e}",
                collection=name,
                details={"vector_size": vector_size, "recreate": recreate},
            ) from e

        descriptor.created = True
        return descriptor
