"""
FastAPI endpoints for the RAG chat backend.

POST /rag/embed                   - Chunk, embed and store a document
POST /rag/chat                    - Retrieval-augmented chat (SSE stream)
GET  /rag/status                  - Record count and model configuration
GET  /rag/documents/{id}/similar  - Records similar to a stored record
"""

import asyncio
import logging
from contextlib import aclosing
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from ragchat.config import DEFAULT_QUERY_LIMIT, DEFAULT_QUERY_THRESHOLD
from ragchat.embeddings.schemas import SimilarityResult
from ragchat.errors import InvalidInput, NotFound, StoreError
from ragchat.services import RAGServices

from .ingest import ingest_document
from .schemas import ChatRequest, EmbedRequest, IngestResult, StatusResponse
from .sse import SSE_HEADERS, sse_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag", tags=["rag"])


def get_services(request: Request) -> RAGServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="RAG services not initialised")
    return services


@router.post("/embed", response_model=IngestResult)
async def embed_document(
    req: EmbedRequest,
    services: RAGServices = Depends(get_services),
):
    settings = services.settings
    separator = req.separator if req.separator is not None else settings.chunk_separator
    max_chunk_size = req.max_chunk_size if req.max_chunk_size is not None else settings.max_chunk_size
    if max_chunk_size < 1:
        raise HTTPException(status_code=400, detail="max_chunk_size must be positive")

    return await ingest_document(
        req.text,
        services.embedder,
        services.store,
        separator=separator,
        max_chunk_size=max_chunk_size,
    )


@router.post("/chat")
async def chat(
    req: ChatRequest,
    services: RAGServices = Depends(get_services),
):
    """
    Stream a grounded answer for the conversation as server-sent events.

    Event types: retrieval, content, error, done.
    """
    if not req.messages:
        raise HTTPException(status_code=400, detail="messages must not be empty")

    logger.info("[rag] Chat request: %d messages", len(req.messages))

    async def event_stream():
        async with aclosing(services.streamer.events(req.messages)) as events:
            async for event in events:
                yield sse_event(event)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/status", response_model=StatusResponse)
async def rag_status(services: RAGServices = Depends(get_services)):
    settings = services.settings
    try:
        records = await asyncio.to_thread(services.store.count)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return StatusResponse(
        records=records,
        chat_model=settings.chat_model,
        embedding_model=settings.embedding_model,
        embedding_dimensions=settings.embedding_dimensions,
        retrieval_threshold=settings.retrieval_threshold,
    )


@router.get("/documents/{record_id}/similar", response_model=List[SimilarityResult])
async def similar_documents(
    record_id: str,
    threshold: float = Query(DEFAULT_QUERY_THRESHOLD),
    limit: int = Query(DEFAULT_QUERY_LIMIT),
    services: RAGServices = Depends(get_services),
):
    try:
        return await asyncio.to_thread(
            services.store.find_similar_excluding_self, record_id, threshold, limit
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
