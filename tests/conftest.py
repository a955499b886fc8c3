"""Pytest configuration and fixtures for pdf-ingest tests."""

import hashlib
from typing import Iterable, List, Optional

import pytest
from qdrant_client import QdrantClient

from pdf_ingest.config import PipelineConfig
from pdf_ingest.models.chunk import Chunk
from pdf_ingest.services.chunking_service import ChunkingService
from pdf_ingest.services.embedding_service import EmbeddingService
from pdf_ingest.services.qdrant_service import QdrantService

TEST_DIMENSION = 8


class FakeEmbeddingModel:
    """Deterministic stand-in for fastembed.TextEmbedding."""

    def __init__(self, dimension: int = TEST_DIMENSION, fail_on_call: Optional[int] = None):
        self.dimension = dimension
        self.fail_on_call = fail_on_call
        self.calls: List[List[str]] = []

    def embed(self, documents: Iterable[str], batch_size: int = 256):
        documents = list(documents)
        self.calls.append(documents)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("model crashed")
        for text in documents:
            digest = hashlib.sha256(text.encode("utf-8")).digest()
            yield [1.0 + digest[i] / 255.0 for i in range(self.dimension)]


@pytest.fixture
def fake_model():
    return FakeEmbeddingModel()


@pytest.fixture
def embedding_service(fake_model):
    return EmbeddingService(model=fake_model, model_name="fake-model", dimension=TEST_DIMENSION, batch_size=4)


@pytest.fixture
def qdrant_client():
    client = QdrantClient(location=":memory:")
    yield client
    client.close()


@pytest.fixture
def store(qdrant_client):
    return QdrantService(client=qdrant_client, url="http://localhost:6333")


@pytest.fixture(scope="session")
def chunking_service():
    return ChunkingService(encoding_name="cl100k_base")


@pytest.fixture
def pipeline_config():
    return PipelineConfig(chunk_size=40, collection_name="test", vector_size=TEST_DIMENSION)


@pytest.fixture
def sample_text():
    paragraphs = []
    for p in range(6):
        sentences = [f"Paragraph {p} sentence {s} talks about vectors and chunks." for s in range(5)]
        paragraphs.append(" ".join(sentences))
    return "\n\n".join(paragraphs)


def make_chunks(texts: List[str], file_name: str = "doc.pdf") -> List[Chunk]:
    return [
        Chunk(file_name=file_name, sequence_number=i, text=t, token_count=len(t.split()))
        for i, t in enumerate(texts)
    ]


@pytest.fixture
def chunk_factory():
    return make_chunks
