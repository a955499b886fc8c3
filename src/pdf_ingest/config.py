"""Configuration management using pydantic-settings."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Log output format."""

    TEXT = "text"
    JSON = "json"


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_", case_sensitive=False)

    url: str = Field(
        default="http://localhost:6333", description="Qdrant connection URL. Env var: QDRANT_URL"
    )
    api_key: Optional[str] = Field(
        default=None, description="Qdrant API key (for Qdrant Cloud). Env var: QDRANT_API_KEY"
    )
    timeout: int = Field(default=30, description="Request timeout in seconds. Env var: QDRANT_TIMEOUT")
    prefer_grpc: bool = Field(
        default=False, description="Talk to Qdrant over gRPC. Env var: QDRANT_PREFER_GRPC"
    )
    grpc_port: int = Field(default=6334, description="Qdrant gRPC port. Env var: QDRANT_GRPC_PORT")
    upsert_batch_size: int = Field(
        default=256,
        description="Points per upsert request. Env var: QDRANT_UPSERT_BATCH_SIZE",
    )

    @field_validator("upsert_batch_size")
    @classmethod
    def validate_upsert_batch_size(cls, v: int) -> int:
        """Validate upsert batch size."""
        if v <= 0:
            raise ValueError("QDRANT_UPSERT_BATCH_SIZE must be > 0")
        return v

    @property
    def is_cloud(self) -> bool:
        """Check if using Qdrant Cloud (has API key)."""
        return bool(self.api_key)


class EmbeddingSettings(BaseSettings):
    """Embedding model configuration."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="fastembed model name. Env var: EMBEDDING_MODEL",
    )
    embedding_dimension: int = Field(
        default=384,
        description="Vector size produced by the model (used for collection sizing). Env var: EMBEDDING_DIMENSION",
    )
    embedding_batch_size: int = Field(
        default=256,
        description="Texts per embedding call. Env var: EMBEDDING_BATCH_SIZE",
    )
    embedding_max_retries: int = Field(
        default=1,
        description="Attempts per embedding call (1 = no retry). Env var: EMBEDDING_MAX_RETRIES",
    )
    embedding_cache_dir: Optional[str] = Field(
        default=None,
        description="Directory for downloaded model files. Env var: EMBEDDING_CACHE_DIR",
    )
    embedding_threads: Optional[int] = Field(
        default=None,
        description="ONNX runtime threads (None = library default). Env var: EMBEDDING_THREADS",
    )

    @field_validator("embedding_dimension", "embedding_batch_size", "embedding_max_retries")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate positive integer settings."""
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @property
    def model_name(self) -> str:
        return self.embedding_model

    @property
    def dimension(self) -> int:
        return self.embedding_dimension

    @property
    def batch_size(self) -> int:
        return self.embedding_batch_size

    @property
    def max_retries(self) -> int:
        return self.embedding_max_retries


class ChunkingSettings(BaseSettings):
    """Text chunking configuration."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    chunk_size: int = Field(default=200, description="Chunk size in tokens. Env var: CHUNK_SIZE")
    chunk_encoding: str = Field(
        default="cl100k_base",
        description="tiktoken encoding used to measure chunk length. Env var: CHUNK_ENCODING",
    )


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="pdf-ingest", description="Application name. Env var: APP_NAME")
    debug: bool = Field(default=False, description="Enable debug mode. Env var: DEBUG")
    log_level: str = Field(default="INFO", description="Logging level. Env var: LOG_LEVEL")
    log_format: LogFormat = Field(
        default=LogFormat.TEXT, description="Log format: text or json. Env var: LOG_FORMAT"
    )
    collection_name: str = Field(
        default="test", description="Default Qdrant collection. Env var: COLLECTION_NAME"
    )

    # Supported file types (stored as string, parsed to list)
    allowed_file_types_str: Optional[str] = Field(
        default="pdf,txt,md",
        description="Allowed file types for processing (comma-separated). Env var: ALLOWED_FILE_TYPES",
    )

    # Sub-settings
    qdrant: Optional[QdrantSettings] = None
    embedding: Optional[EmbeddingSettings] = None
    chunking: Optional[ChunkingSettings] = None

    @model_validator(mode="after")
    def initialize_nested_settings(self) -> "Settings":
        """Initialize nested settings to ensure they read from environment."""
        if self.qdrant is None:
            self.qdrant = QdrantSettings()
        if self.embedding is None:
            self.embedding = EmbeddingSettings()
        if self.chunking is None:
            self.chunking = ChunkingSettings()
        return self

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format", mode="before")
    @classmethod
    def parse_log_format(cls, v):
        """Parse log format from string."""
        if isinstance(v, str):
            try:
                return LogFormat(v.lower())
            except ValueError:
                return LogFormat.TEXT
        return v

    @property
    def allowed_file_types(self) -> List[str]:
        """Get allowed file types as a list."""
        if not self.allowed_file_types_str:
            return ["pdf", "txt", "md"]
        return [
            ft.strip().lower().lstrip(".")
            for ft in self.allowed_file_types_str.split(",")
            if ft.strip()
        ]


class PipelineConfig(BaseModel):
    """
    Per-run configuration passed explicitly into the ingestion pipeline.

    Values are validated by the pipeline itself so that a bad chunk size or
    collection name surfaces as InvalidConfigurationError before any I/O.
    """

    chunk_size: int = Field(default=200, description="Maximum tokens per chunk")
    collection_name: str = Field(default="test", description="Target Qdrant collection")
    force_recreate: bool = Field(
        default=False, description="Delete and recreate the collection if it already exists"
    )
    vector_size: int = Field(default=384, description="Embedding dimension used to size the collection")
    debug: bool = Field(default=False, description="Verbose diagnostic output")

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "PipelineConfig":
        """Build a run configuration from settings, applying non-None overrides."""
        values = {
            "chunk_size": settings.chunking.chunk_size,
            "collection_name": settings.collection_name,
            "vector_size": settings.embedding.dimension,
            "debug": settings.debug,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
