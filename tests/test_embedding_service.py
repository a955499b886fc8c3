import pytest

from conftest import TEST_DIMENSION, FakeEmbeddingModel
from pdf_ingest.services.embedding_service import EmbeddingService
from pdf_ingest.utils.errors import EmbeddingError


@pytest.mark.asyncio
async def test_embed_chunks_preserves_order_and_identity(embedding_service, fake_model, chunk_factory):
    chunks = chunk_factory([f"chunk {i}" for i in range(10)])
    embedded = await embedding_service.embed_chunks(chunks)

    assert [e.chunk.sequence_number for e in embedded] == list(range(10))
    assert [e.chunk for e in embedded] == chunks
    assert all(e.dimension == TEST_DIMENSION for e in embedded)
    # same text always yields the same vector
    expected = list(FakeEmbeddingModel().embed([c.text for c in chunks]))
    assert [e.vector for e in embedded] == expected


@pytest.mark.asyncio
async def test_embed_chunks_batches_calls(embedding_service, fake_model, chunk_factory):
    chunks = chunk_factory([f"chunk {i}" for i in range(10)])
    await embedding_service.embed_chunks(chunks)
    assert [len(call) for call in fake_model.calls] == [4, 4, 2]
    assert [t for call in fake_model.calls for t in call] == [c.text for c in chunks]


@pytest.mark.asyncio
async def test_embed_chunks_empty_does_not_load_model(chunk_factory):
    service = EmbeddingService(model=None, dimension=TEST_DIMENSION)
    assert await service.embed_chunks([]) == []
    assert service._model is None


@pytest.mark.asyncio
async def test_model_failure_aborts_whole_batch(chunk_factory):
    model = FakeEmbeddingModel(fail_on_call=3)
    service = EmbeddingService(model=model, model_name="fake-model", dimension=TEST_DIMENSION, batch_size=1)
    chunks = chunk_factory([f"chunk {i}" for i in range(5)])

    with pytest.raises(EmbeddingError) as exc_info:
        await service.embed_chunks(chunks)

    assert "model crashed" in exc_info.value.message
    assert exc_info.value.details["model"] == "fake-model"
    assert len(model.calls) == 3


@pytest.mark.asyncio
async def test_dimension_mismatch_is_rejected(chunk_factory):
    service = EmbeddingService(model=FakeEmbeddingModel(dimension=4), dimension=TEST_DIMENSION)
    with pytest.raises(EmbeddingError) as exc_info:
        await service.embed_chunks(chunk_factory(["a", "b"]))
    assert exc_info.value.details["expected_dimension"] == TEST_DIMENSION
    assert exc_info.value.details["actual_dimension"] == 4


@pytest.mark.asyncio
async def test_response_size_mismatch_is_rejected(chunk_factory):
    class ShortModel(FakeEmbeddingModel):
        def embed(self, documents, batch_size=256):
            documents = list(documents)
            return list(super().embed(documents[:-1], batch_size))

    service = EmbeddingService(model=ShortModel(), dimension=TEST_DIMENSION)
    with pytest.raises(EmbeddingError) as exc_info:
        await service.embed_chunks(chunk_factory(["a", "b", "c"]))
    assert exc_info.value.details["expected"] == 3
    assert exc_info.value.details["got"] == 2


@pytest.mark.asyncio
async def test_embed_retries_at_call_boundary_when_configured():
    model = FakeEmbeddingModel(fail_on_call=1)
    service = EmbeddingService(model=model, dimension=TEST_DIMENSION, max_retries=2)
    vectors = await service.embed(["hello"])
    assert len(vectors) == 1
    assert len(model.calls) == 2


@pytest.mark.asyncio
async def test_embed_does_not_retry_by_default():
    model = FakeEmbeddingModel(fail_on_call=1)
    service = EmbeddingService(model=model, dimension=TEST_DIMENSION, max_retries=1)
    with pytest.raises(EmbeddingError):
        await service.embed(["hello"])
    assert len(model.calls) == 1
