"""
Write path: document text -> chunks -> embeddings -> stored records.
"""

import asyncio
import logging
from typing import Optional

from ragchat.config import DEFAULT_CHUNK_SEPARATOR, DEFAULT_MAX_CHUNK_SIZE
from ragchat.embeddings.schemas import EmbeddingRecord
from ragchat.embeddings.service import Embedder
from ragchat.errors import RAGError
from ragchat.vector.store import VectorStore

from .schemas import IngestResult

logger = logging.getLogger(__name__)


async def ingest_document(
    text: str,
    embedder: Embedder,
    store: VectorStore,
    separator: Optional[str] = DEFAULT_CHUNK_SEPARATOR,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
) -> IngestResult:
    """
    Chunk, embed and store one document.

    All records of a document are written in a single transaction; on any
    failure nothing is stored and the error is returned in the result.
    """
    try:
        embedded = await embedder.embed(text, separator=separator, max_chunk_size=max_chunk_size)
    except RAGError as e:
        logger.error("[ingest] Embedding failed: %s", e)
        return IngestResult(success=False, error=str(e))

    if not embedded:
        logger.info("[ingest] Nothing to store (empty document)")
        return IngestResult(success=True)

    records = [EmbeddingRecord(content=c.text, embedding=c.embedding) for c in embedded]
    inserted = await asyncio.to_thread(store.insert_many, records)
    if not inserted.success:
        logger.error("[ingest] Store rejected %d records: %s", len(records), inserted.error)
        return IngestResult(success=False, error=inserted.error)

    logger.info("[ingest] Stored %d chunks", inserted.count)
    return IngestResult(success=True, count=inserted.count, ids=inserted.ids)
