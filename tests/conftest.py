# FILE: tests/conftest.py
"""
Pytest configuration for the ragchat test suite.

Provides:
- a file-backed SQLite store per test (threads share it via to_thread)
- fake OpenAI clients for embeddings and streamed chat completions

Async tests run under pytest-asyncio in auto mode (see pyproject.toml).
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest


@pytest.fixture
def session_factory(tmp_path):
    from ragchat.db import create_db_engine, create_session_factory, init_db

    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store3(session_factory):
    """Scan-backed store over 3-dimensional vectors."""
    from ragchat.vector import ScanVectorIndex, VectorStore

    return VectorStore(ScanVectorIndex(session_factory), dimensions=3)


def embedding_response(vectors):
    return SimpleNamespace(
        data=[SimpleNamespace(index=i, embedding=v) for i, v in enumerate(vectors)]
    )


def chat_chunk(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(delta=SimpleNamespace(content=content))]
    )


class FakeChatStream:
    """Async iterator over chat completion chunks, optionally failing midway."""

    def __init__(self, tokens, error=None):
        self._chunks = [chat_chunk(t) for t in tokens]
        self._error = error

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


def make_fake_client(vector_for=None, tokens=("Hel", "lo"), chat_error=None):
    """
    AsyncOpenAI stand-in.

    vector_for(text) -> embedding; chat streams ``tokens`` then raises
    ``chat_error`` if given.
    """
    vector_for = vector_for or (lambda text: [1.0, 0.0, 0.0])
    client = MagicMock()

    async def create_embeddings(model, input):
        return embedding_response([vector_for(t) for t in input])

    async def create_chat(**kwargs):
        return FakeChatStream(tokens, chat_error)

    client.embeddings.create = AsyncMock(side_effect=create_embeddings)
    client.chat.completions.create = AsyncMock(side_effect=create_chat)
    return client


@pytest.fixture
def fake_client():
    return make_fake_client()
