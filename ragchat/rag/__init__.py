"""
RAG layer: retrieval, prompt augmentation, streaming and the write path.
"""

from .schemas import (
    ChatMessage,
    ChatRequest,
    ContentPart,
    EmbedRequest,
    IngestResult,
    StatusResponse,
    StreamEvent,
)
from .prompt import build_reference_block, build_system_prompt, augment_messages
from .retrieval import Retriever
from .generation import ChatGenerator
from .streamer import EventChannel, ResponseStreamer, StreamState, extract_query_text
from .sse import sse_event, sse_error, SSE_HEADERS
from .ingest import ingest_document

__all__ = [
    # Schemas
    "ChatMessage",
    "ChatRequest",
    "ContentPart",
    "EmbedRequest",
    "IngestResult",
    "StatusResponse",
    "StreamEvent",
    # Prompt
    "build_reference_block",
    "build_system_prompt",
    "augment_messages",
    # Pipeline
    "Retriever",
    "ChatGenerator",
    "EventChannel",
    "ResponseStreamer",
    "StreamState",
    "extract_query_text",
    # Wire
    "sse_event",
    "sse_error",
    "SSE_HEADERS",
    # Write path
    "ingest_document",
]
