"""Command-line entry point.

Usage:
    pdf-ingest document.pdf
    pdf-ingest document.pdf 300 --debug
    pdf-ingest document.pdf --collection papers --no-recreate
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from pdf_ingest.config import PipelineConfig, get_settings
from pdf_ingest.pipeline.ingestion_pipeline import IngestionPipeline
from pdf_ingest.services.qdrant_service import QdrantService
from pdf_ingest.utils.errors import IngestionException, InvalidConfigurationError, UploadError
from pdf_ingest.utils.logging import log_error, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-ingest",
        description="Chunk a document, embed the chunks and upload them to a Qdrant collection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload with the default chunk size (200 tokens) into the "test" collection
  pdf-ingest paper.pdf

  # Smaller chunks, verbose output
  pdf-ingest paper.pdf 120 --debug

  # Append to an existing collection instead of clearing it
  pdf-ingest paper.pdf --collection papers --no-recreate
        """,
    )
    parser.add_argument("path", help="Path to the document (pdf, txt or md)")
    parser.add_argument(
        "chunk_size",
        nargs="?",
        default=None,
        help="Maximum tokens per chunk (positive integer, default: CHUNK_SIZE or 200)",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose diagnostic output")
    parser.add_argument(
        "--collection",
        default=None,
        help="Target collection (default: COLLECTION_NAME or 'test'). "
        "An existing collection named here is cleared unless --no-recreate is given",
    )
    recreate = parser.add_mutually_exclusive_group()
    recreate.add_argument(
        "--recreate",
        dest="recreate",
        action="store_const",
        const=True,
        default=None,
        help="Delete and recreate the collection if it exists",
    )
    recreate.add_argument(
        "--no-recreate",
        dest="recreate",
        action="store_const",
        const=False,
        help="Keep an existing collection and add points to it",
    )
    parser.add_argument("--qdrant-url", default=None, help="Qdrant URL (default: QDRANT_URL)")
    return parser


def parse_chunk_size(value: Optional[str]) -> Optional[int]:
    """Parse the chunk_size positional; None when omitted."""
    if value is None:
        return None
    try:
        chunk_size = int(value)
    except ValueError:
        raise InvalidConfigurationError(
            f"Chunk size must be a positive integer, got {value!r}", field="chunk_size", value=value
        ) from None
    if chunk_size <= 0:
        raise InvalidConfigurationError(
            f"Chunk size must be a positive integer, got {value!r}", field="chunk_size", value=value
        )
    return chunk_size


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Turn parsed arguments into a run configuration."""
    settings = get_settings()
    if args.collection is not None and not args.collection.strip():
        raise InvalidConfigurationError("Collection name cannot be empty", field="collection_name", value="")

    force_recreate = args.recreate
    if force_recreate is None:
        # naming a collection explicitly means "start it fresh"
        force_recreate = args.collection is not None

    return PipelineConfig.from_settings(
        settings,
        chunk_size=parse_chunk_size(args.chunk_size),
        collection_name=args.collection,
        force_recreate=force_recreate,
        debug=args.debug or None,
    )


def prompt_recreate(name: str) -> bool:
    """Ask whether an existing collection should be cleared."""
    answer = input(f"Collection {name} already exists. Clear it (y) or only add to it (n)? (Y/n) ")
    return answer.strip().lower() != "n"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(level="DEBUG" if (args.debug or settings.debug) else None)

    try:
        config = build_config(args)
        if config.debug:
            print("Debug mode is on")

        confirm = prompt_recreate if config.debug and sys.stdin.isatty() else None
        pipeline = IngestionPipeline(store=QdrantService(url=args.qdrant_url), confirm_recreate=confirm)

        print(f"Chunk size: {config.chunk_size}")
        print(f"Collection name: {config.collection_name}")
        result = asyncio.run(pipeline.run(args.path, config))
    except UploadError as e:
        log_error(e, context={"path": args.path})
        print(f"Error: {e.message}", file=sys.stderr)
        print(f"Uploaded {e.uploaded_count} embeddings to Qdrant before the failure", file=sys.stderr)
        return e.exit_code
    except IngestionException as e:
        log_error(e, context={"path": args.path})
        print(f"Error: {e.message}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130

    print(f"Created {result.chunk_count} chunks from {result.file_name}")
    print(f"Uploaded {result.uploaded_count} embeddings to Qdrant")
    print(f"Data uploaded successfully! See it at {pipeline.store.url.rstrip('/')}/dashboard/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
