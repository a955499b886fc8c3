"""Custom exception classes for pdf-ingest."""

from typing import Any, Dict, List, Optional


class IngestionException(Exception):
    """Base exception for all pdf-ingest errors."""

    def __init__(
        self,
        message: str,
        exit_code: int = 1,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.exit_code = exit_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "exit_code": self.exit_code,
                "details": self.details,
            }
        }


class InputError(IngestionException):
    """Exception raised when the source document cannot be read or has no text."""

    def __init__(
        self,
        message: str = "Source document could not be read",
        path: Optional[str] = None,
        file_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if path:
            error_details["path"] = path
        if file_type:
            error_details["file_type"] = file_type
        super().__init__(
            message=message,
            exit_code=2,
            code="INPUT_ERROR",
            details=error_details,
        )


class EmptyInputError(InputError):
    """Exception raised when the extracted text produces no chunks."""

    def __init__(
        self,
        message: str = "Document contains no text to chunk",
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, path=path, details=details)
        self.code = "EMPTY_INPUT"


class InvalidConfigurationError(IngestionException):
    """Exception raised for invalid run configuration (chunk size, collection name, ...)."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
            error_details["value"] = value
        super().__init__(
            message=message,
            exit_code=3,
            code="INVALID_CONFIGURATION",
            details=error_details,
        )


class StoreUnavailableError(IngestionException):
    """Exception raised when the Qdrant instance cannot be reached."""

    def __init__(
        self,
        message: str = "Qdrant instance is not reachable",
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if url:
            error_details["url"] = url
        super().__init__(
            message=message,
            exit_code=4,
            code="STORE_UNAVAILABLE",
            details=error_details,
        )


class CollectionError(IngestionException):
    """Exception raised when Qdrant rejects a collection create/delete."""

    def __init__(
        self,
        message: str = "Qdrant collection operation failed",
        collection: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if collection:
            error_details["collection"] = collection
        super().__init__(
            message=message,
            exit_code=5,
            code="COLLECTION_ERROR",
            details=error_details,
        )


class EmbeddingError(IngestionException):
    """Exception raised for embedding generation errors."""

    def __init__(
        self,
        message: str = "Embedding generation failed",
        model: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if model:
            error_details["model"] = model
        super().__init__(
            message=message,
            exit_code=6,
            code="EMBEDDING_ERROR",
            details=error_details,
        )


class UploadError(IngestionException):
    """
    Exception raised when Qdrant rejects an upsert batch.

    Carries the ids of the points that were stored before the failing batch,
    the ids of the rejected batch and the number of points never attempted.
    """

    def __init__(
        self,
        message: str = "Qdrant upsert failed",
        collection: Optional[str] = None,
        succeeded_point_ids: Optional[List[str]] = None,
        failed_point_ids: Optional[List[str]] = None,
        pending_count: int = 0,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.succeeded_point_ids = list(succeeded_point_ids or [])
        self.failed_point_ids = list(failed_point_ids or [])
        self.pending_count = pending_count
        error_details = details or {}
        if collection:
            error_details["collection"] = collection
        if reason:
            error_details["reason"] = reason
        error_details["uploaded"] = len(self.succeeded_point_ids)
        error_details["failed"] = len(self.failed_point_ids)
        error_details["pending"] = pending_count
        super().__init__(
            message=message,
            exit_code=7,
            code="UPLOAD_ERROR",
            details=error_details,
        )

    @property
    def uploaded_count(self) -> int:
        """Number of points stored before the failing batch."""
        return len(self.succeeded_point_ids)
