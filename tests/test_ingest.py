# FILE: tests/test_ingest.py
"""
Tests for ragchat/rag/ingest.py and scripts/embed_docs.py
Write path: chunk -> embed -> store.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from unittest.mock import AsyncMock, Mock, patch

from conftest import make_fake_client
from ragchat.embeddings.service import Embedder
from ragchat.errors import EmbeddingServiceError
from ragchat.rag.ingest import ingest_document


class TestIngestDocument:
    """Test document ingestion."""

    @pytest.mark.asyncio
    async def test_chunks_stored(self, store3):
        """Test each chunk becomes one record."""
        embedder = Embedder(make_fake_client())

        result = await ingest_document("one||two||three", embedder, store3, separator="||")

        assert result.success
        assert result.count == 3
        assert len(result.ids) == 3
        assert store3.count() == 3

    @pytest.mark.asyncio
    async def test_chunk_size_applied(self, store3):
        """Test oversized pieces are sliced before embedding."""
        embedder = Embedder(make_fake_client())

        result = await ingest_document("abcdefghij", embedder, store3, separator=None, max_chunk_size=4)
        assert result.count == 3

    @pytest.mark.asyncio
    async def test_empty_document(self, store3):
        """Test an empty document stores nothing and succeeds."""
        client = make_fake_client()

        result = await ingest_document("", Embedder(client), store3)
        assert result.success
        assert result.count == 0
        client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embedding_failure_stores_nothing(self, store3):
        """Test upstream failure is reported and nothing is written."""
        embedder = Mock()
        embedder.embed = AsyncMock(side_effect=EmbeddingServiceError("quota exceeded"))

        result = await ingest_document("text", embedder, store3)
        assert not result.success
        assert result.error == "quota exceeded"
        assert store3.count() == 0

    @pytest.mark.asyncio
    async def test_store_rejection_reported(self, store3):
        """Test vectors of the wrong width fail the whole document."""
        embedder = Embedder(make_fake_client(lambda t: [1.0, 0.0]))

        result = await ingest_document("a||b", embedder, store3, separator="||")
        assert not result.success
        assert "dimensions" in result.error
        assert store3.count() == 0

    @pytest.mark.asyncio
    async def test_invalid_chunk_size(self, store3):
        """Test a non-positive chunk size is reported, not raised."""
        result = await ingest_document("text", Embedder(make_fake_client()), store3, max_chunk_size=0)
        assert not result.success


class TestEmbedDocsScript:
    """Test the ingestion CLI."""

    def test_parser_defaults(self):
        """Test the default document path and unset overrides."""
        from scripts.embed_docs import build_parser, DEFAULT_DOC_PATH

        args = build_parser().parse_args([])
        assert args.path == DEFAULT_DOC_PATH == "./ai-docs/basic-components.txt"
        assert args.separator is None
        assert args.max_chunk_size is None

    def test_parser_overrides(self):
        """Test separator and chunk size flags."""
        from scripts.embed_docs import build_parser

        args = build_parser().parse_args(["doc.txt", "--separator", "---", "--max-chunk-size", "100"])
        assert args.path == "doc.txt"
        assert args.separator == "---"
        assert args.max_chunk_size == 100

    def test_missing_file(self, tmp_path):
        """Test a missing file exits non-zero without building services."""
        from scripts import embed_docs

        with patch.object(embed_docs, "build_services") as build:
            assert embed_docs.main([str(tmp_path / "missing.txt")]) == 1
            build.assert_not_called()

    def test_ingests_file(self, tmp_path, store3):
        """Test a file is read and stored."""
        from scripts import embed_docs

        doc = tmp_path / "doc.txt"
        doc.write_text("alpha---beta", encoding="utf-8")
        services = Mock(embedder=Embedder(make_fake_client()), store=store3)

        with patch.object(embed_docs, "build_services", return_value=services):
            assert embed_docs.main([str(doc), "--separator", "---"]) == 0
        assert store3.count() == 2
