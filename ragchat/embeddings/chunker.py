"""
Document chunking.

Splits raw document text into bounded-size segments for independent
embedding. No semantic boundary awareness: separator first, then fixed-width
character slices.
"""

from typing import List, Optional

from ragchat.config import DEFAULT_CHUNK_SEPARATOR, DEFAULT_MAX_CHUNK_SIZE
from ragchat.errors import InvalidInput

__all__ = ["chunk_text", "DEFAULT_CHUNK_SEPARATOR", "DEFAULT_MAX_CHUNK_SIZE"]


def chunk_text(
    text: Optional[str],
    separator: Optional[str] = None,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
) -> List[str]:
    """
    Split text into non-empty chunks of at most ``max_chunk_size`` characters.

    With a separator, pieces that are blank after trimming are dropped (kept
    pieces are not trimmed). Without one, the whole text is a single piece.
    Oversized pieces are cut into slices of exactly ``max_chunk_size``.
    """
    if max_chunk_size < 1:
        raise InvalidInput(f"max_chunk_size must be positive, got {max_chunk_size}")

    if not text or not text.strip():
        return []

    if separator:
        pieces = [p for p in text.split(separator) if p.strip()]
    else:
        pieces = [text]

    chunks: List[str] = []
    for piece in pieces:
        if len(piece) <= max_chunk_size:
            chunks.append(piece)
            continue
        for start in range(0, len(piece), max_chunk_size):
            chunks.append(piece[start:start + max_chunk_size])

    return chunks
