# FILE: ragchat/embeddings/__init__.py
"""
Embedding module for ragchat.
Provides chunking, embedding generation, vector math and the stored record model.
"""

from .chunker import chunk_text

from .service import (
    Embedder,
    cosine_similarity,
    cosine_distance,
)

from .models import DocumentEmbedding, VectorType

from .schemas import (
    EmbeddedChunk,
    EmbeddingRecord,
    SimilarityResult,
    InsertResult,
    SearchOutcome,
)


__all__ = [
    # Chunking
    "chunk_text",
    # Service
    "Embedder",
    "cosine_similarity",
    "cosine_distance",
    # Model
    "DocumentEmbedding",
    "VectorType",
    # Schemas
    "EmbeddedChunk",
    "EmbeddingRecord",
    "SimilarityResult",
    "InsertResult",
    "SearchOutcome",
]
