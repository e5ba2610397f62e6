"""
Vector index abstraction.

The store delegates nearest-neighbour ranking to a VectorIndex:

    query(vector, limit) -> hits ordered by ascending cosine distance

Ties keep the natural scan order (created_at, then id), so results are
deterministic for a fixed store state.

Implementations:
- ScanVectorIndex: portable, ranks every row in Python (SQLite and friends)
- PgVectorIndex: PostgreSQL + pgvector, ranking done by the ``<=>`` operator
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from pgvector.sqlalchemy import Vector
from sqlalchemy import Float, cast, func, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ragchat.embeddings.models import DocumentEmbedding, new_record_id
from ragchat.embeddings.schemas import EmbeddingRecord
from ragchat.embeddings.service import cosine_distance
from ragchat.errors import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexHit:
    """Raw ranked row as returned by an index."""
    id: str
    content: str
    distance: float


class VectorIndex(ABC):
    """Persistence + nearest-neighbour primitive behind VectorStore."""

    @abstractmethod
    def insert_many(self, records: Sequence[EmbeddingRecord]) -> List[str]:
        """Insert all records in one transaction. Returns ids in input order."""

    @abstractmethod
    def query(self, vector: Sequence[float], limit: int) -> List[IndexHit]:
        """Return up to ``limit`` rows ordered by ascending cosine distance."""

    @abstractmethod
    def get_embedding(self, record_id: str) -> Optional[List[float]]:
        """Embedding of ``record_id`` or None when absent."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""


class SqlVectorIndex(VectorIndex):
    """Shared SQLAlchemy plumbing. Each call uses its own session."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def insert_many(self, records: Sequence[EmbeddingRecord]) -> List[str]:
        rows = [
            DocumentEmbedding(id=new_record_id(), content=r.content, embedding=r.embedding)
            for r in records
        ]
        ids = [row.id for row in rows]
        try:
            with self.session_factory() as db:
                with db.begin():
                    db.add_all(rows)
        except SQLAlchemyError as e:
            logger.error("[vector] Insert of %d rows failed: %s", len(rows), e)
            raise StoreError(str(e)) from e
        return ids

    def get_embedding(self, record_id: str) -> Optional[List[float]]:
        try:
            with self.session_factory() as db:
                return db.execute(
                    select(DocumentEmbedding.embedding).where(DocumentEmbedding.id == record_id)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def count(self) -> int:
        try:
            with self.session_factory() as db:
                return db.execute(select(func.count(DocumentEmbedding.id))).scalar_one()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e


class ScanVectorIndex(SqlVectorIndex):
    """Full scan with cosine distance computed in Python."""

    def query(self, vector: Sequence[float], limit: int) -> List[IndexHit]:
        try:
            with self.session_factory() as db:
                rows = db.execute(
                    select(
                        DocumentEmbedding.id,
                        DocumentEmbedding.content,
                        DocumentEmbedding.embedding,
                    ).order_by(DocumentEmbedding.created_at, DocumentEmbedding.id)
                ).all()
        except SQLAlchemyError as e:
            logger.error("[vector] Scan query failed: %s", e)
            raise StoreError(str(e)) from e

        hits = []
        for row in rows:
            if len(row.embedding) != len(vector):
                logger.warning(
                    "[vector] Skipping record %s: dimension %d != %d",
                    row.id, len(row.embedding), len(vector),
                )
                continue
            hits.append(
                IndexHit(id=row.id, content=row.content, distance=cosine_distance(vector, row.embedding))
            )
        # sort() is stable: equal distances keep scan order
        hits.sort(key=lambda h: h.distance)
        return hits[:limit]


class PgVectorIndex(SqlVectorIndex):
    """Ranking delegated to pgvector's ``<=>`` cosine distance operator."""

    def __init__(self, session_factory: sessionmaker, dimensions: int):
        super().__init__(session_factory)
        self.dimensions = dimensions

    def query(self, vector: Sequence[float], limit: int) -> List[IndexHit]:
        query_vector = cast(
            literal([float(v) for v in vector], type_=Vector(self.dimensions)),
            Vector(self.dimensions),
        )
        distance = DocumentEmbedding.embedding.op("<=>", return_type=Float)(query_vector)
        stmt = (
            select(
                DocumentEmbedding.id,
                DocumentEmbedding.content,
                distance.label("distance"),
            )
            .order_by(distance, DocumentEmbedding.created_at, DocumentEmbedding.id)
            .limit(limit)
        )
        try:
            with self.session_factory() as db:
                rows = db.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.error("[vector] pgvector query failed: %s", e)
            raise StoreError(str(e)) from e

        return [
            IndexHit(id=row.id, content=row.content, distance=float(row.distance))
            for row in rows
        ]


def build_vector_index(session_factory: sessionmaker, dimensions: int) -> VectorIndex:
    """Pick the index implementation for the session factory's database."""
    engine = session_factory.kw["bind"]
    if engine.dialect.name == "postgresql":
        logger.info("[vector] Using pgvector index (dim=%d)", dimensions)
        return PgVectorIndex(session_factory, dimensions)
    logger.info("[vector] Using scan index on %s (dim=%d)", engine.dialect.name, dimensions)
    return ScanVectorIndex(session_factory)
