"""
Pydantic schemas for embedding records, similarity results and store outcomes.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class EmbeddedChunk(BaseModel):
    """A chunk of text paired with its embedding vector."""
    text: str
    embedding: List[float]


class EmbeddingRecord(BaseModel):
    """Input row for the write path."""
    content: str
    embedding: List[float]


class SimilarityResult(BaseModel):
    """Single ranked result. similarity = 1 - cosine distance, in [-1, 1]."""
    id: str
    content: str
    similarity: float


class InsertResult(BaseModel):
    """Outcome of a batched insert. All rows are visible or none are."""
    success: bool
    ids: List[str] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None


class SearchOutcome(BaseModel):
    """Structured similarity search outcome used at component boundaries."""
    success: bool
    results: Optional[List[SimilarityResult]] = None
    error: Optional[str] = None
    total_matches: Optional[int] = None
