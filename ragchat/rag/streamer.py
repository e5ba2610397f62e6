"""
Response streamer: retrieval, prompt augmentation and token streaming.

Flow for one request:
    1. retrieval {status: "searching"}
    2. Retriever.retrieve(last user text)
    3. retrieval {status: "found", results, count}  (or error + close)
    4. content {content, accumulated} per generated token
    5. done {message, totalLength, retrievalCount}

Generation runs in a producer task feeding an asyncio.Queue; the streamer
drains it in arrival order. The output channel is closed exactly once.
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncGenerator, Dict, List, Optional, Sequence, Union

from ragchat.config import DEFAULT_TOP_K
from ragchat.errors import RAGError

from .generation import ChatGenerator
from .prompt import DEFAULT_SYSTEM_PROMPT_TEMPLATE, augment_messages
from .retrieval import Retriever
from .schemas import ChatMessage, StreamEvent

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    DONE = "done"
    ERRORED = "errored"


_END = object()


class EventChannel:
    """
    Single-consumer event queue with an idempotent close.

    Iterating yields events until the channel is closed and drained.
    ``state`` tracks the request that owns the channel.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self.state: Optional[StreamState] = None
        self.closed = False
        self.close_count = 0

    async def send(self, event: StreamEvent) -> None:
        if self.closed:
            return
        await self._queue.put(event)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.close_count += 1
        self._queue.put_nowait(_END)

    def __aiter__(self):
        return self

    async def __anext__(self) -> StreamEvent:
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        return item


def extract_query_text(messages: Sequence[Union[ChatMessage, Dict]]) -> str:
    """Text of the last message; first text part for multi-part content."""
    if not messages:
        return ""
    last = messages[-1]
    if not isinstance(last, ChatMessage):
        last = ChatMessage.model_validate(last)
    return last.text()


def _to_wire(message: Union[ChatMessage, Dict]) -> Dict:
    if isinstance(message, ChatMessage):
        return message.model_dump(exclude_none=True)
    return dict(message)


class ResponseStreamer:
    """Drives one chat request from retrieval through generation."""

    def __init__(
        self,
        retriever: Retriever,
        generator: ChatGenerator,
        top_k: int = DEFAULT_TOP_K,
        prompt_template: str = DEFAULT_SYSTEM_PROMPT_TEMPLATE,
    ):
        self.retriever = retriever
        self.generator = generator
        self.top_k = top_k
        self.prompt_template = prompt_template

    async def _produce(self, messages: List[Dict], tokens: asyncio.Queue) -> None:
        try:
            async for token in self.generator.stream_tokens(messages):
                await tokens.put(token)
        except Exception as e:
            await tokens.put(e)
        else:
            await tokens.put(_END)

    async def run(self, messages: Sequence[Union[ChatMessage, Dict]], channel: EventChannel) -> StreamState:
        channel.state = StreamState.RETRIEVING
        producer: Optional[asyncio.Task] = None
        try:
            await channel.send(StreamEvent.retrieval(
                status="searching",
                message="Searching for relevant references...",
            ))

            outcome = await self.retriever.retrieve(extract_query_text(messages), top_k=self.top_k)
            if not outcome.success:
                logger.warning("[rag] Retrieval failed: %s", outcome.error)
                channel.state = StreamState.ERRORED
                await channel.send(StreamEvent.error(f"Retrieval failed: {outcome.error}"))
                return channel.state

            results = outcome.results or []
            await channel.send(StreamEvent.retrieval(
                status="found",
                results=[r.model_dump() for r in results],
                count=len(results),
            ))

            augmented = augment_messages(
                [_to_wire(m) for m in messages],
                results,
                self.prompt_template,
            )

            channel.state = StreamState.GENERATING
            tokens: asyncio.Queue = asyncio.Queue()
            producer = asyncio.create_task(self._produce(augmented, tokens))

            accumulated = ""
            while True:
                item = await tokens.get()
                if item is _END:
                    break
                if isinstance(item, Exception):
                    raise item
                accumulated += item
                await channel.send(StreamEvent.content(item, accumulated))

            channel.state = StreamState.DONE
            await channel.send(StreamEvent.done(len(accumulated), len(results)))
            logger.info("[rag] Stream complete: %d chars, %d references", len(accumulated), len(results))

        except asyncio.CancelledError:
            logger.info("[rag] Stream cancelled by client")
            raise
        except RAGError as e:
            channel.state = StreamState.ERRORED
            await channel.send(StreamEvent.error(e.message))
        except Exception as e:
            logger.exception("[rag] Stream failed: %s", e)
            channel.state = StreamState.ERRORED
            await channel.send(StreamEvent.error(str(e)))
        finally:
            if producer is not None and not producer.done():
                producer.cancel()
            channel.close()

        return channel.state

    async def events(self, messages: Sequence[Union[ChatMessage, Dict]]) -> AsyncGenerator[StreamEvent, None]:
        """Run the streamer in a task and yield its events; cancels it if the consumer stops early."""
        channel = EventChannel()
        task = asyncio.create_task(self.run(messages, channel))
        try:
            async for event in channel:
                yield event
            await task
        finally:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
