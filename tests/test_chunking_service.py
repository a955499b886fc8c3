import math

import pytest

from pdf_ingest.utils.errors import InvalidConfigurationError


def _squash(text: str) -> str:
    return "".join(text.split())


@pytest.mark.asyncio
async def test_chunks_reconstruct_source_text(chunking_service, sample_text):
    chunks = await chunking_service.chunk_text(sample_text, max_tokens=40, file_name="doc.pdf")
    assert len(chunks) > 1
    assert _squash("".join(c.text for c in chunks)) == _squash(sample_text)


@pytest.mark.asyncio
async def test_chunks_respect_token_limit(chunking_service, sample_text):
    chunks = await chunking_service.chunk_text(sample_text, max_tokens=40)
    for c in chunks:
        assert 0 < c.token_count <= 40
        assert c.token_count == chunking_service.count_tokens(c.text)


@pytest.mark.asyncio
async def test_sequence_numbers_follow_source_order(chunking_service, sample_text):
    chunks = await chunking_service.chunk_text(sample_text, max_tokens=30, file_name="doc.pdf")
    assert [c.sequence_number for c in chunks] == list(range(len(chunks)))
    assert all(c.file_name == "doc.pdf" for c in chunks)
    # every chunk is the next verbatim span of the source
    cursor = 0
    for c in chunks:
        position = sample_text.index(c.text, cursor)
        assert sample_text[cursor:position].strip() == ""
        cursor = position + len(c.text)
    assert sample_text[cursor:].strip() == ""


@pytest.mark.asyncio
async def test_short_paragraphs_are_merged(chunking_service):
    text = "Para one has some text.\n\nPara two has some more text.\n\nPara three has even more text."
    chunks = await chunking_service.chunk_text(text, max_tokens=200)
    assert len(chunks) == 1
    assert chunks[0].text == text


@pytest.mark.asyncio
async def test_paragraph_boundaries_are_preferred(chunking_service):
    paragraphs = [" ".join([f"Topic {p} detail {i}." for i in range(12)]) for p in range(3)]
    text = "\n\n".join(paragraphs)
    limit = max(chunking_service.count_tokens(p) for p in paragraphs) + 5
    assert chunking_service.count_tokens(paragraphs[0] + "\n\n" + paragraphs[1]) > limit

    chunks = await chunking_service.chunk_text(text, max_tokens=limit)
    assert [c.text for c in chunks] == paragraphs


@pytest.mark.asyncio
async def test_long_sentence_is_split_mid_sentence(chunking_service):
    sentence = " ".join(f"word{i}" for i in range(300)) + "."
    text = f"Short intro. {sentence} Short outro."
    chunks = await chunking_service.chunk_text(text, max_tokens=50)
    assert all(c.token_count <= 50 for c in chunks)
    assert chunks[0].text == "Short intro."
    assert chunks[-1].text == "Short outro."
    assert _squash("".join(c.text for c in chunks)) == _squash(text)


@pytest.mark.asyncio
async def test_single_oversized_word_is_cut(chunking_service):
    word = "supercalifragilistic" * 60
    chunks = await chunking_service.chunk_text(word, max_tokens=25)
    assert len(chunks) > 1
    assert all(c.token_count <= 25 for c in chunks)
    assert "".join(c.text for c in chunks) == word


@pytest.mark.asyncio
async def test_multi_token_character_is_never_split(chunking_service):
    crab = "\U0001F980"
    chunks = await chunking_service.chunk_text(crab * 3, max_tokens=1)
    assert [c.text for c in chunks] == [crab, crab, crab]
    assert all(c.token_count == chunking_service.count_tokens(crab) for c in chunks)


@pytest.mark.asyncio
async def test_uniform_text_yields_expected_chunk_count(chunking_service):
    text = " ".join(f"Item number {i} is listed here." for i in range(140))
    total = chunking_service.count_tokens(text)
    chunks = await chunking_service.chunk_text(text, max_tokens=200)
    assert math.ceil(total / 200) <= len(chunks) <= math.ceil(total / 200) + 1
    assert all(c.token_count <= 200 for c in chunks)


@pytest.mark.asyncio
async def test_default_chunk_size_is_used(chunking_service):
    text = " ".join(f"Sentence {i}." for i in range(400))
    chunks = await chunking_service.chunk_text(text)
    assert len(chunks) > 1
    assert all(c.token_count <= 200 for c in chunks)


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
async def test_empty_text_yields_no_chunks(chunking_service, text):
    assert await chunking_service.chunk_text(text, max_tokens=10) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("max_tokens", [0, -5, "10", 2.5, True])
async def test_invalid_max_tokens_rejected(chunking_service, max_tokens):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        await chunking_service.chunk_text("some text", max_tokens=max_tokens)
    assert exc_info.value.details["field"] == "chunk_size"


@pytest.mark.asyncio
async def test_special_token_text_is_counted_not_rejected(chunking_service):
    chunks = await chunking_service.chunk_text("The marker <|endoftext|> appears in the PDF.", max_tokens=50)
    assert len(chunks) == 1
