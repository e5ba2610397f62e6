#!/usr/bin/env python3
"""
Embed a document and store its chunks.

Usage:
    python scripts/embed_docs.py [path]
    python scripts/embed_docs.py docs/guide.txt --separator "---" --max-chunk-size 4000
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from ragchat.config import get_settings
from ragchat.rag.ingest import ingest_document
from ragchat.services import build_services

DEFAULT_DOC_PATH = "./ai-docs/basic-components.txt"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chunk, embed and store a text document"
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=DEFAULT_DOC_PATH,
        help="Text file to ingest"
    )
    parser.add_argument(
        "--separator",
        default=None,
        help="Chunk separator (default: RAG_CHUNK_SEPARATOR)"
    )
    parser.add_argument(
        "--max-chunk-size",
        type=int,
        default=None,
        help="Maximum characters per chunk (default: RAG_MAX_CHUNK_SIZE)"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.path)
    if not path.is_file():
        print(f"Error: File not found: {path}")
        return 1

    separator = args.separator if args.separator is not None else settings.chunk_separator
    max_chunk_size = args.max_chunk_size if args.max_chunk_size is not None else settings.max_chunk_size

    print("Document Embedding")
    print("=" * 50)
    print(f"File: {path}")
    print(f"Separator: {separator!r}")
    print(f"Max chunk size: {max_chunk_size}")
    print()

    services = build_services(settings)
    text = path.read_text(encoding="utf-8")
    result = asyncio.run(ingest_document(
        text,
        services.embedder,
        services.store,
        separator=separator,
        max_chunk_size=max_chunk_size,
    ))

    if not result.success:
        print(f"Embedding failed: {result.error}")
        return 1

    print("Embedding Complete!")
    print(f"  Chunks stored: {result.count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
