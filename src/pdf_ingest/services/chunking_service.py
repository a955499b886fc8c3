"""Text chunking service."""

import re
from typing import List, Optional, Tuple

import tiktoken

from pdf_ingest.config import get_settings
from pdf_ingest.models.chunk import Chunk
from pdf_ingest.utils.errors import InvalidConfigurationError
from pdf_ingest.utils.logging import get_logger

logger = get_logger("chunking_service")
settings = get_settings()

# Semantic levels, coarsest first: (split pattern, joiner used when merging)
_LEVELS: List[Tuple[str, str]] = [
    (r"\n\s*\n", "\n\n"),  # paragraphs
    (r"\n", "\n"),  # lines
    (r"(?<=[.!?])\s+", " "),  # sentences
    (r"\s+", " "),  # words
]


def validate_chunk_size(chunk_size) -> int:
    """Return chunk_size if it is a positive integer, else raise InvalidConfigurationError."""
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise InvalidConfigurationError(
            "Chunk size must be a positive integer",
            field="chunk_size",
            value=chunk_size,
        )
    return chunk_size


class ChunkingService:
    """
    Split text into token-bounded chunks along semantic boundaries.

    Text is split on paragraphs first, then lines, sentences and words, and
    adjacent pieces are merged back together while the merged text still fits
    in ``max_tokens``. A piece that alone exceeds the limit is split at the next
    finer level and its parts become chunks of their own; a single word longer
    than the limit is cut at the longest character prefix that fits.

    The only chunks that can exceed ``max_tokens`` are single characters that
    the encoding alone maps to more tokens than the limit (some emoji and CJK
    code points with a limit of 1 or 2); a character is never split.

    Chunks are trimmed, so concatenating them reproduces the input modulo
    whitespace.
    """

    def __init__(self, encoding_name: Optional[str] = None):
        """
        Initialize the chunking service.

        Args:
            encoding_name: tiktoken encoding used for token counting (defaults to cl100k_base)
        """
        self._encoding = tiktoken.get_encoding(encoding_name or settings.chunking.chunk_encoding)

    async def chunk_text(
        self,
        text: str,
        max_tokens: Optional[int] = None,
        file_name: str = "",
    ) -> List[Chunk]:
        """
        Chunk text into an ordered list of chunks.

        Args:
            text: Input text to chunk
            max_tokens: Maximum tokens per chunk (defaults to settings.chunking.chunk_size)
            file_name: Source file basename recorded on every chunk

        Returns:
            Chunks in source order, sequence numbers 0..N-1. Empty or
            whitespace-only text yields an empty list.

        Raises:
            InvalidConfigurationError: If max_tokens is not a positive integer
        """
        max_tokens = validate_chunk_size(settings.chunking.chunk_size if max_tokens is None else max_tokens)

        if text is None or not text.strip():
            logger.info("Chunking skipped: text is empty")
            return []

        pieces = self._split(text.strip(), max_tokens, level=0)

        chunks: List[Chunk] = []
        for piece in pieces:
            chunks.append(
                Chunk(
                    file_name=file_name,
                    sequence_number=len(chunks),
                    text=piece,
                    token_count=self._count_tokens(piece),
                )
            )

        logger.info(
            f"Chunked text: chunks={len(chunks)}, max_tokens={max_tokens}, "
            f"total_tokens={sum(c.token_count for c in chunks)}"
        )
        return chunks

    def count_tokens(self, text: str) -> int:
        """Number of tokens in text under the configured encoding."""
        return self._count_tokens(text)

    def _count_tokens(self, text: str) -> int:
        return len(self._encoding.encode(text, disallowed_special=()))

    def _split(self, text: str, max_tokens: int, level: int) -> List[str]:
        if self._count_tokens(text) <= max_tokens:
            return [text]
        if level >= len(_LEVELS):
            return self._split_by_prefix(text, max_tokens)

        pattern, joiner = _LEVELS[level]
        parts = [p.strip() for p in re.split(pattern, text) if p.strip()]
        if len(parts) <= 1:
            return self._split(text, max_tokens, level + 1)

        return self._pack(parts, joiner, max_tokens, level)

    def _pack(self, parts: List[str], joiner: str, max_tokens: int, level: int) -> List[str]:
        out: List[str] = []
        current: List[str] = []

        def flush() -> None:
            if current:
                out.append(joiner.join(current))
                current.clear()

        for part in parts:
            if self._count_tokens(part) > max_tokens:
                # oversized unit: its sub-pieces stand alone
                flush()
                out.extend(self._split(part, max_tokens, level + 1))
                continue

            if current and self._count_tokens(joiner.join(current + [part])) > max_tokens:
                flush()
            current.append(part)

        flush()
        return out

    def _split_by_prefix(self, text: str, max_tokens: int) -> List[str]:
        """Cut text into the longest character prefixes that fit in max_tokens (at least one character each)."""
        out: List[str] = []
        rest = text
        while rest:
            lo, hi = 1, len(rest)
            while lo < hi:
                mid = (lo + hi + 1) // 2
                if self._count_tokens(rest[:mid]) <= max_tokens:
                    lo = mid
                else:
                    hi = mid - 1
            out.append(rest[:lo])
            rest = rest[lo:]
        return out
