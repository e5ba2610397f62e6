"""
Vector layer: index backends and the similarity store built on them.
"""

from .index import (
    IndexHit,
    VectorIndex,
    ScanVectorIndex,
    PgVectorIndex,
    build_vector_index,
)
from .store import VectorStore

__all__ = [
    "IndexHit",
    "VectorIndex",
    "ScanVectorIndex",
    "PgVectorIndex",
    "build_vector_index",
    "VectorStore",
]
