"""
RAG Pydantic schemas.

Request/response contracts for the chat and ingest endpoints, plus the typed
events emitted by the response streamer.
"""

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ContentPart(BaseModel):
    """One part of a multi-part message (text, image_url, ...)."""
    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str
    content: Union[str, List[ContentPart]] = ""

    def text(self) -> str:
        """Plain text of the message: the string itself or the first text part."""
        if isinstance(self.content, str):
            return self.content
        for part in self.content:
            if part.type == "text":
                return part.text or ""
        return ""


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(
        default_factory=list,
        validation_alias=AliasChoices("messages", "message"),
    )


class EmbedRequest(BaseModel):
    text: str
    separator: Optional[str] = None
    max_chunk_size: Optional[int] = None


class IngestResult(BaseModel):
    """Outcome of the write path."""
    success: bool
    count: int = 0
    ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class StatusResponse(BaseModel):
    records: int
    chat_model: str
    embedding_model: str
    embedding_dimensions: int
    retrieval_threshold: float


EventType = Literal["retrieval", "content", "error", "done"]


class StreamEvent(BaseModel):
    """One server-sent event: {"type": ..., "data": {...}}."""
    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def retrieval(cls, **data: Any) -> "StreamEvent":
        return cls(type="retrieval", data=data)

    @classmethod
    def content(cls, content: str, accumulated: str) -> "StreamEvent":
        return cls(type="content", data={"content": content, "accumulated": accumulated})

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls(type="error", data={"message": message})

    @classmethod
    def done(cls, total_length: int, retrieval_count: int) -> "StreamEvent":
        return cls(
            type="done",
            data={
                "message": "Conversation complete",
                "totalLength": total_length,
                "retrievalCount": retrieval_count,
            },
        )
