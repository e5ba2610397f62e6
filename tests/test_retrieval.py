# FILE: tests/test_retrieval.py
"""
Tests for ragchat/rag/retrieval.py and ragchat/rag/prompt.py
Query embedding -> store search, and reference prompt assembly.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from unittest.mock import AsyncMock, Mock

from conftest import make_fake_client
from ragchat.embeddings.schemas import SearchOutcome, SimilarityResult
from ragchat.embeddings.service import Embedder
from ragchat.errors import EmbeddingServiceError
from ragchat.rag.prompt import augment_messages, build_reference_block, build_system_prompt
from ragchat.rag.retrieval import Retriever


class TestRetriever:
    """Test the retrieval orchestrator."""

    @pytest.mark.asyncio
    async def test_passes_store_outcome_through(self, store3):
        """Test results match the store's own ranking."""
        store3.insert_many([
            {"content": "cats", "embedding": [1.0, 0.0, 0.0]},
            {"content": "stocks", "embedding": [0.0, 0.0, 1.0]},
        ])
        embedder = Embedder(make_fake_client(lambda t: [1.0, 0.0, 0.0]))
        retriever = Retriever(embedder, store3, threshold=0.5)

        outcome = await retriever.retrieve("tell me about cats", top_k=5)
        assert outcome.success
        assert [r.content for r in outcome.results] == ["cats"]
        assert outcome.total_matches == 1

    @pytest.mark.asyncio
    async def test_uses_configured_threshold_and_top_k(self):
        """Test threshold and top_k are forwarded verbatim."""
        embedder = Mock()
        embedder.embed_single = AsyncMock(return_value=[1.0, 0.0, 0.0])
        store = Mock()
        store.search.return_value = SearchOutcome(success=True, results=[], total_matches=0)

        await Retriever(embedder, store, threshold=0.01).retrieve("q", top_k=3)
        store.search.assert_called_once_with([1.0, 0.0, 0.0], 0.01, 3)

    @pytest.mark.asyncio
    async def test_blank_query_fails_structured(self, store3):
        """Test an empty query yields success=False, not an exception."""
        client = make_fake_client()
        retriever = Retriever(Embedder(client), store3)

        outcome = await retriever.retrieve("")
        assert not outcome.success
        assert outcome.error
        client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embedding_failure_fails_structured(self, store3):
        """Test upstream embedding errors yield success=False."""
        embedder = Mock()
        embedder.embed_single = AsyncMock(side_effect=EmbeddingServiceError("rate limited"))

        outcome = await Retriever(embedder, store3).retrieve("question")
        assert not outcome.success
        assert outcome.error == "rate limited"

    @pytest.mark.asyncio
    async def test_store_failure_passed_through(self):
        """Test a failed store outcome is returned verbatim."""
        embedder = Mock()
        embedder.embed_single = AsyncMock(return_value=[1.0, 0.0, 0.0])
        store = Mock()
        failed = SearchOutcome(success=False, error="boom")
        store.search.return_value = failed

        assert await Retriever(embedder, store).retrieve("q") == failed


class TestPrompt:
    """Test reference block and system prompt assembly."""

    @pytest.fixture
    def results(self):
        return [
            SimilarityResult(id="a", content="first passage", similarity=0.9),
            SimilarityResult(id="b", content="second passage", similarity=0.8),
        ]

    def test_reference_block(self, results):
        """Test numbered labels joined by a blank line."""
        assert build_reference_block(results) == (
            "[reference 1]\nfirst passage\n\n[reference 2]\nsecond passage"
        )

    def test_empty_reference_block(self):
        """Test no results give an empty block."""
        assert build_reference_block([]) == ""

    def test_system_prompt_template(self, results):
        """Test the template receives the reference block."""
        prompt = build_system_prompt(results, template="Use these:\n{references}")
        assert prompt.startswith("Use these:\n[reference 1]")

    def test_augment_prepends_single_system_message(self, results):
        """Test one system message is prepended to the history."""
        history = [{"role": "user", "content": "hi"}]
        augmented = augment_messages(history, results)

        assert len(augmented) == 2
        assert augmented[0]["role"] == "system"
        assert "[reference 2]\nsecond passage" in augmented[0]["content"]
        assert augmented[1] == history[0]
