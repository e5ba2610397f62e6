"""
SQLAlchemy model for embedding storage.
"""

import json
from datetime import datetime, timezone
from uuid import uuid4

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, String, Text, DateTime, DDL, TypeDecorator, event

from ragchat.config import DEFAULT_EMBEDDING_DIMENSIONS, _int_env
from ragchat.db import Base

EMBEDDING_DIMENSIONS = _int_env("RAG_EMBEDDING_DIMENSIONS", DEFAULT_EMBEDDING_DIMENSIONS)


class VectorType(TypeDecorator):
    """
    Fixed-width float vector column.

    Usage in models:
        embedding = Column(VectorType(1536), nullable=False)

    PostgreSQL stores a native pgvector ``vector(D)`` so the ``<=>`` cosine
    distance operator and the HNSW index apply. Every other dialect stores a
    JSON-encoded float array in a TEXT column.
    """

    impl = Text
    cache_ok = True

    def __init__(self, dimensions: int):
        super().__init__()
        self.dimensions = dimensions

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Vector(self.dimensions))
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        values = [float(v) for v in value]
        if dialect.name == "postgresql":
            return values
        return json.dumps(values)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = json.loads(value)
        # pgvector hands back a numpy array
        return [float(v) for v in value]


def new_record_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentEmbedding(Base):
    """
    One embedded chunk of a reference document.

    id: opaque unique string, assigned at insert
    content: the chunk text that was embedded
    embedding: vector of EMBEDDING_DIMENSIONS floats

    Rows are immutable once written.
    """
    __tablename__ = "document_embeddings"

    id = Column(String(191), primary_key=True, default=new_record_id)
    content = Column(Text, nullable=False)
    embedding = Column(VectorType(EMBEDDING_DIMENSIONS), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)


# PostgreSQL only: pgvector extension before tables, cosine HNSW index after
event.listen(
    Base.metadata,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS vector").execute_if(dialect="postgresql"),
)
event.listen(
    DocumentEmbedding.__table__,
    "after_create",
    DDL(
        "CREATE INDEX IF NOT EXISTS document_embeddings_embedding_hnsw "
        "ON document_embeddings USING hnsw (embedding vector_cosine_ops)"
    ).execute_if(dialect="postgresql"),
)


def set_embedding_dimensions(dimensions: int) -> None:
    """Set the vector column width. Call before tables are created."""
    DocumentEmbedding.__table__.c.embedding.type.dimensions = dimensions
