"""
Core embedding service: chunk embedding and vector math.
"""

import logging
import math
from typing import List, Optional, Sequence, Union

from openai import AsyncOpenAI, OpenAIError

from ragchat.config import (
    DEFAULT_CHUNK_SEPARATOR,
    DEFAULT_EMBEDDING_BATCH_SIZE,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_MAX_CHUNK_SIZE,
)
from ragchat.errors import DimensionMismatch, EmbeddingServiceError, InvalidInput

from .chunker import chunk_text
from .schemas import EmbeddedChunk

logger = logging.getLogger(__name__)


# ============ EMBEDDING GENERATION ============

class Embedder:
    """
    Converts text into embedding vectors through the OpenAI embeddings API.

    The client is constructed once per process and passed in.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = DEFAULT_EMBEDDING_MODEL,
        batch_size: int = DEFAULT_EMBEDDING_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise InvalidInput(f"batch_size must be positive, got {batch_size}")
        self.client = client
        self.model = model
        self.batch_size = batch_size

    async def embed(
        self,
        text_or_chunks: Union[str, Sequence[str], None],
        model: Optional[str] = None,
        separator: Optional[str] = DEFAULT_CHUNK_SEPARATOR,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    ) -> List[EmbeddedChunk]:
        """
        Embed a document (chunked first) or an explicit list of chunks.

        result[i] is the embedding of chunk[i]. Blank input returns [].
        """
        if text_or_chunks is None:
            return []
        if isinstance(text_or_chunks, str):
            chunks = chunk_text(text_or_chunks, separator, max_chunk_size)
        else:
            chunks = list(text_or_chunks)

        # Fixed-width slicing can leave whitespace-only tails
        chunks = [c for c in chunks if c and c.strip()]
        if not chunks:
            return []

        use_model = model or self.model
        results: List[EmbeddedChunk] = []
        for start in range(0, len(chunks), self.batch_size):
            batch = chunks[start:start + self.batch_size]
            vectors = await self._create(batch, use_model)
            results.extend(
                EmbeddedChunk(text=chunk, embedding=vector)
                for chunk, vector in zip(batch, vectors)
            )

        logger.info("[embeddings] Embedded %d chunks with %s", len(results), use_model)
        return results

    async def embed_single(self, text: Optional[str], model: Optional[str] = None) -> List[float]:
        """Embed one string. Blank text is rejected before any API call."""
        if not text or not text.strip():
            raise InvalidInput("Text to embed must not be empty")
        vectors = await self._create([text], model or self.model)
        return vectors[0]

    async def _create(self, inputs: List[str], model: str) -> List[List[float]]:
        try:
            response = await self.client.embeddings.create(model=model, input=inputs)
        except OpenAIError as e:
            logger.error("[embeddings] Generation error: %s", e)
            raise EmbeddingServiceError(str(e)) from e

        data = list(response.data)
        if len(data) != len(inputs):
            raise EmbeddingServiceError(
                f"Embedding API returned {len(data)} vectors for {len(inputs)} inputs"
            )
        data.sort(key=lambda item: item.index)
        return [list(item.embedding) for item in data]


# ============ VECTOR MATH ============

def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors."""
    if len(vec_a) != len(vec_b):
        raise DimensionMismatch(
            f"Vector dimensions differ: {len(vec_a)} != {len(vec_b)}"
        )

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


def cosine_distance(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """pgvector-compatible cosine distance: 1 - cosine similarity."""
    return 1.0 - cosine_similarity(vec_a, vec_b)
