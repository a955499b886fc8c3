"""Qdrant store handle."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, TypeVar

import grpc
from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import Distance, PointStruct, VectorParams

from pdf_ingest.config import get_settings
from pdf_ingest.models.point import UploadPoint
from pdf_ingest.utils.errors import StoreUnavailableError
from pdf_ingest.utils.logging import get_logger

logger = get_logger("qdrant_service")
settings = get_settings()

T = TypeVar("T")


def is_connection_error(error: Exception) -> bool:
    """True when the error means Qdrant could not be reached (as opposed to rejecting a request)."""
    if isinstance(error, (ResponseHandlingException, ConnectionError, TimeoutError)):
        return True
    if isinstance(error, grpc.RpcError):
        return error.code() in (grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.DEADLINE_EXCEEDED)
    return False


class QdrantService:
    """
    Thin async wrapper over QdrantClient.

    Every call runs in a worker thread. Connection failures are raised as
    StoreUnavailableError; any other client error is re-raised unchanged so
    that callers can map it to their own error kind.
    """

    def __init__(self, client: Optional[QdrantClient] = None, url: Optional[str] = None) -> None:
        self._client = client
        self._url = url or settings.qdrant.url

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> QdrantClient:
        if self._client is not None:
            return self._client

        self._client = QdrantClient(
            url=self._url,
            api_key=settings.qdrant.api_key,
            timeout=settings.qdrant.timeout,
            prefer_grpc=settings.qdrant.prefer_grpc,
            grpc_port=settings.qdrant.grpc_port,
        )
        return self._client

    async def _call(self, operation: str, fn: Callable[[QdrantClient], T]) -> T:
        try:
            client = self._get_client()
            return await asyncio.to_thread(fn, client)
        except UnexpectedResponse:
            raise
        except Exception as e:
            if is_connection_error(e):
                raise StoreUnavailableError(
                    f"Qdrant instance not reachable at {self._url}: {e}",
                    url=self._url,
                    details={"operation": operation},
                ) from e
            raise

    def _refused(self, operation: str, error: UnexpectedResponse) -> StoreUnavailableError:
        return StoreUnavailableError(
            f"Qdrant at {self._url} refused {operation}: {error.status_code} {error.reason_phrase}",
            url=self._url,
            details={"operation": operation, "status_code": error.status_code},
        )

    async def check_connection(self) -> None:
        """
        Verify the store answers.

        An error status on this first call (401/403 for a wrong API key, a
        proxy 5xx) is reported the same way as an unreachable store.
        """
        try:
            await self._call("get_collections", lambda c: c.get_collections())
        except UnexpectedResponse as e:
            raise self._refused("get_collections", e) from e
        logger.info(f"Connected to Qdrant at {self._url}")

    async def collection_exists(self, name: str) -> bool:
        return await self._call("collection_exists", lambda c: c.collection_exists(collection_name=name))

    async def create_collection(self, name: str, vector_size: int, distance: Distance = Distance.COSINE) -> None:
        await self._call(
            "create_collection",
            lambda c: c.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=vector_size, distance=distance),
            ),
        )
        logger.info(f"Qdrant collection created: {name} (vector_size={vector_size}, distance={distance.value})")

    async def delete_collection(self, name: str) -> None:
        await self._call("delete_collection", lambda c: c.delete_collection(collection_name=name))
        logger.info(f"Qdrant collection deleted: {name}")

    async def upsert_points(self, collection_name: str, points: List[UploadPoint]) -> None:
        """Upsert one batch of points and wait until they are stored."""
        structs = [PointStruct(id=p.id, vector=p.vector, payload=p.payload_dict()) for p in points]
        await self._call(
            "upsert",
            lambda c: c.upsert(collection_name=collection_name, points=structs, wait=True),
        )

    async def count_points(self, collection_name: str) -> int:
        try:
            result = await self._call("count", lambda c: c.count(collection_name=collection_name, exact=True))
        except UnexpectedResponse as e:
            raise self._refused("count", e) from e
        return result.count
