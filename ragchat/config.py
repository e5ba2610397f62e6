"""
ragchat configuration.

All tunables in one place. Values come from the environment (``.env`` is
loaded by the entry points before settings are read) and fall back to the
defaults below.

The retrieval threshold is a per-deployment value: the chat path
queries with a very low threshold (0.01) while direct store lookups default
to 0.7.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

logger = logging.getLogger(__name__)

# ============================================================================
# DATABASE
# ============================================================================

DEFAULT_DATABASE_URL: str = "sqlite:///./data/ragchat.db"

# ============================================================================
# MODELS
# ============================================================================

DEFAULT_CHAT_MODEL: str = "gpt-3.5-turbo"
DEFAULT_EMBEDDING_MODEL: str = "text-embedding-ada-002"
DEFAULT_EMBEDDING_DIMENSIONS: int = 1536
DEFAULT_EMBEDDING_BATCH_SIZE: int = 100

DEFAULT_TEMPERATURE: float = 0.7
DEFAULT_MAX_TOKENS: int = 2000

# ============================================================================
# CHUNKING
# ============================================================================

DEFAULT_CHUNK_SEPARATOR: str = "-------split line-------"
DEFAULT_MAX_CHUNK_SIZE: int = 8000

# ============================================================================
# RETRIEVAL
# ============================================================================

DEFAULT_RETRIEVAL_THRESHOLD: float = 0.01
DEFAULT_TOP_K: int = 5

# Store-level defaults (direct lookups, batch queries)
DEFAULT_QUERY_THRESHOLD: float = 0.7
DEFAULT_QUERY_LIMIT: int = 10
MAX_QUERY_LIMIT: int = 100

# ============================================================================
# SERVER
# ============================================================================

DEFAULT_CORS_ORIGINS: str = "*"
DEFAULT_LOG_LEVEL: str = "INFO"


def _str_env(name: str, default: str) -> str:
    v = os.getenv(name, "").strip()
    return v or default


def _int_env(name: str, default: int) -> int:
    v = os.getenv(name, "").strip()
    if not v:
        return default
    try:
        return int(v)
    except ValueError:
        logger.warning("[config] %s=%r is not an integer, using %s", name, v, default)
        return default


def _float_env(name: str, default: float) -> float:
    v = os.getenv(name, "").strip()
    if not v:
        return default
    try:
        return float(v)
    except ValueError:
        logger.warning("[config] %s=%r is not a number, using %s", name, v, default)
        return default


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration. Construct with ``Settings.from_env()``."""

    database_url: str = DEFAULT_DATABASE_URL
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None

    chat_model: str = DEFAULT_CHAT_MODEL
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    embedding_batch_size: int = DEFAULT_EMBEDDING_BATCH_SIZE
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    chunk_separator: str = DEFAULT_CHUNK_SEPARATOR
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE

    retrieval_threshold: float = DEFAULT_RETRIEVAL_THRESHOLD
    top_k: int = DEFAULT_TOP_K

    cors_origins: List[str] = field(default_factory=lambda: [DEFAULT_CORS_ORIGINS])
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "Settings":
        origins = _str_env("RAG_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        return cls(
            database_url=_str_env("RAG_DATABASE_URL", DEFAULT_DATABASE_URL),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            chat_model=_str_env("RAG_CHAT_MODEL", DEFAULT_CHAT_MODEL),
            embedding_model=_str_env("RAG_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
            embedding_dimensions=_int_env("RAG_EMBEDDING_DIMENSIONS", DEFAULT_EMBEDDING_DIMENSIONS),
            embedding_batch_size=_int_env("RAG_EMBEDDING_BATCH_SIZE", DEFAULT_EMBEDDING_BATCH_SIZE),
            temperature=_float_env("RAG_TEMPERATURE", DEFAULT_TEMPERATURE),
            max_tokens=_int_env("RAG_MAX_TOKENS", DEFAULT_MAX_TOKENS),
            # Separator is taken verbatim; an explicitly empty value disables splitting
            chunk_separator=os.getenv("RAG_CHUNK_SEPARATOR", DEFAULT_CHUNK_SEPARATOR),
            max_chunk_size=_int_env("RAG_MAX_CHUNK_SIZE", DEFAULT_MAX_CHUNK_SIZE),
            retrieval_threshold=_float_env("RAG_RETRIEVAL_THRESHOLD", DEFAULT_RETRIEVAL_THRESHOLD),
            top_k=_int_env("RAG_TOP_K", DEFAULT_TOP_K),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=_str_env("RAG_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    return Settings.from_env()
