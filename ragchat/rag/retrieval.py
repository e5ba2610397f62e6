"""
Retrieval orchestrator: user text -> query embedding -> ranked passages.

Adds no filtering of its own; the store's threshold/limit rules are final.
"""

import asyncio
import logging

from ragchat.config import DEFAULT_RETRIEVAL_THRESHOLD, DEFAULT_TOP_K
from ragchat.embeddings.schemas import SearchOutcome
from ragchat.embeddings.service import Embedder
from ragchat.errors import EmbeddingServiceError, InvalidInput
from ragchat.vector.store import VectorStore

logger = logging.getLogger(__name__)


class Retriever:
    """Embeds a query and asks the store for the closest passages."""

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        threshold: float = DEFAULT_RETRIEVAL_THRESHOLD,
    ):
        self.embedder = embedder
        self.store = store
        self.threshold = threshold

    async def retrieve(self, user_text: str, top_k: int = DEFAULT_TOP_K) -> SearchOutcome:
        try:
            query_vector = await self.embedder.embed_single(user_text)
        except (InvalidInput, EmbeddingServiceError) as e:
            logger.warning("[rag] Query embedding failed: %s", e)
            return SearchOutcome(success=False, error=str(e))

        # Sync store call runs off the event loop
        outcome = await asyncio.to_thread(self.store.search, query_vector, self.threshold, top_k)
        if outcome.success:
            logger.info("[rag] Retrieved %d passages (top_k=%d)", outcome.total_matches, top_k)
        return outcome
