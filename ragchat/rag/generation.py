"""
Streaming chat completion wrapper.
"""

import logging
from typing import AsyncGenerator, Dict, List

from openai import OpenAIError

from ragchat.config import DEFAULT_CHAT_MODEL, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from ragchat.errors import GenerationServiceError

logger = logging.getLogger(__name__)


class ChatGenerator:
    """Yields completion text fragments from an OpenAI-compatible endpoint."""

    def __init__(
        self,
        client,
        model: str = DEFAULT_CHAT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def stream_tokens(self, messages: List[Dict]) -> AsyncGenerator[str, None]:
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=True,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except OpenAIError as e:
            logger.error("[rag] Chat completion failed: %s", e)
            raise GenerationServiceError(f"Chat completion failed: {e}") from e
