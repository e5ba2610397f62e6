"""
Vector store adapter.

Owns persisted (content, embedding) records and answers similarity queries
with threshold/limit filtering on top of an injected VectorIndex.

Validation always happens before the index is touched.
"""

import asyncio
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from ragchat.config import DEFAULT_QUERY_LIMIT, DEFAULT_QUERY_THRESHOLD, MAX_QUERY_LIMIT
from ragchat.embeddings.schemas import (
    EmbeddingRecord,
    InsertResult,
    SearchOutcome,
    SimilarityResult,
)
from ragchat.errors import BatchQueryError, InvalidInput, NotFound, RAGError, StoreError

from .index import IndexHit, VectorIndex

logger = logging.getLogger(__name__)

# Similarity is rounded so a record queried with its own embedding scores 1.0
SIMILARITY_PRECISION = 6

RecordLike = Union[EmbeddingRecord, Mapping[str, Any]]


class VectorStore:
    """Similarity search over stored embeddings of a fixed dimension."""

    def __init__(self, index: VectorIndex, dimensions: int):
        self.index = index
        self.dimensions = dimensions

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def insert_many(self, records: Sequence[RecordLike]) -> InsertResult:
        """Validate every record, then write them all in one transaction."""
        try:
            rows = [self._coerce_record(i, r) for i, r in enumerate(records)]
        except InvalidInput as e:
            return InsertResult(success=False, error=str(e))

        if not rows:
            return InsertResult(success=True)

        try:
            ids = self.index.insert_many(rows)
        except StoreError as e:
            return InsertResult(success=False, error=str(e))

        logger.info("[vector] Stored %d records", len(ids))
        return InsertResult(success=True, ids=ids, count=len(ids))

    def _coerce_record(self, position: int, record: RecordLike) -> EmbeddingRecord:
        if not isinstance(record, EmbeddingRecord):
            try:
                record = EmbeddingRecord.model_validate(record)
            except ValidationError as e:
                raise InvalidInput(f"Record {position} is malformed: {e}") from e
        if not record.content.strip():
            raise InvalidInput(f"Record {position} has empty content")
        if len(record.embedding) != self.dimensions:
            raise InvalidInput(
                f"Record {position} embedding has {len(record.embedding)} "
                f"dimensions, expected {self.dimensions}"
            )
        return record

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def _validate_vector(self, query_vector: Sequence[float]) -> None:
        if query_vector is None or len(query_vector) == 0:
            raise InvalidInput("Query vector must not be empty")
        if len(query_vector) != self.dimensions:
            raise InvalidInput(
                f"Query vector must have {self.dimensions} dimensions, got {len(query_vector)}"
            )

    @staticmethod
    def _validate_bounds(threshold: float, limit: int) -> None:
        if not -1.0 <= threshold <= 1.0:
            raise InvalidInput(f"Threshold must be between -1 and 1, got {threshold}")
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_QUERY_LIMIT:
            raise InvalidInput(f"Limit must be between 1 and {MAX_QUERY_LIMIT}, got {limit}")

    @staticmethod
    def _rank(hits: Sequence[IndexHit], threshold: float, limit: int) -> List[SimilarityResult]:
        # hits arrive in ascending distance, i.e. descending similarity
        results = []
        for hit in hits:
            similarity = round(1.0 - hit.distance, SIMILARITY_PRECISION)
            if similarity < threshold:
                continue
            results.append(SimilarityResult(id=hit.id, content=hit.content, similarity=similarity))
        return results[:limit]

    def query(
        self,
        query_vector: Sequence[float],
        threshold: float = DEFAULT_QUERY_THRESHOLD,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[SimilarityResult]:
        """Top ``limit`` records with similarity >= threshold, best first."""
        self._validate_vector(query_vector)
        self._validate_bounds(threshold, limit)
        hits = self.index.query(query_vector, limit)
        return self._rank(hits, threshold, limit)

    def search(
        self,
        query_vector: Sequence[float],
        threshold: float = DEFAULT_QUERY_THRESHOLD,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> SearchOutcome:
        """Structured form of ``query``: errors come back as success=False."""
        try:
            results = self.query(query_vector, threshold, limit)
        except RAGError as e:
            logger.error("[vector] Similarity search failed: %s", e)
            return SearchOutcome(success=False, error=str(e))
        return SearchOutcome(success=True, results=results, total_matches=len(results))

    def find_most_similar(
        self,
        query_vector: Sequence[float],
        threshold: float = DEFAULT_QUERY_THRESHOLD,
    ) -> Optional[SimilarityResult]:
        results = self.query(query_vector, threshold, 1)
        return results[0] if results else None

    def find_similar_excluding_self(
        self,
        record_id: str,
        threshold: float = DEFAULT_QUERY_THRESHOLD,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[SimilarityResult]:
        """Records similar to ``record_id``, never including the record itself."""
        self._validate_bounds(threshold, limit)

        embedding = self.index.get_embedding(record_id)
        if embedding is None:
            raise NotFound(f"Record not found: {record_id}")
        self._validate_vector(embedding)

        hits = self.index.query(embedding, limit + 1)
        hits = [h for h in hits if h.id != record_id]
        return self._rank(hits, threshold, limit)

    async def batch_query(
        self,
        queries: Sequence[Sequence[float]],
        threshold: float = DEFAULT_QUERY_THRESHOLD,
        limit: int = 5,
    ) -> List[List[SimilarityResult]]:
        """
        Run every query concurrently; results line up with ``queries``.

        Any failure fails the whole batch with BatchQueryError.
        """
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self.query, q, threshold, limit) for q in queries),
            return_exceptions=True,
        )

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            logger.error("[vector] Batch query: %d of %d failed", len(failures), len(outcomes))
            raise BatchQueryError(len(failures), len(outcomes))

        return list(outcomes)

    def count(self) -> int:
        return self.index.count()
