"""
Process-wide service wiring.

Builds the engine, OpenAI client, store, embedder, retriever and streamer
once at startup; handlers receive them through ``app.state.services``.
"""

import logging
from dataclasses import dataclass

from openai import AsyncOpenAI
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ragchat.config import Settings
from ragchat.db import create_db_engine, create_session_factory, init_db
from ragchat.embeddings.service import Embedder
from ragchat.rag.generation import ChatGenerator
from ragchat.rag.retrieval import Retriever
from ragchat.rag.streamer import ResponseStreamer
from ragchat.vector.index import build_vector_index
from ragchat.vector.store import VectorStore

logger = logging.getLogger(__name__)

# Sent when no key is configured; upstream calls then fail with an auth error.
MISSING_API_KEY = "missing-api-key"


@dataclass
class RAGServices:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    client: AsyncOpenAI
    store: VectorStore
    embedder: Embedder
    generator: ChatGenerator
    retriever: Retriever
    streamer: ResponseStreamer


def build_services(settings: Settings) -> RAGServices:
    engine = create_db_engine(settings.database_url)
    init_db(engine, settings.embedding_dimensions)
    session_factory = create_session_factory(engine)

    api_key = settings.openai_api_key
    if not api_key:
        logger.warning("[services] OPENAI_API_KEY not set; embedding and chat calls will fail")
        api_key = MISSING_API_KEY
    client = AsyncOpenAI(
        api_key=api_key,
        base_url=settings.openai_base_url,
    )

    index = build_vector_index(session_factory, settings.embedding_dimensions)
    store = VectorStore(index, settings.embedding_dimensions)
    embedder = Embedder(client, settings.embedding_model, settings.embedding_batch_size)
    generator = ChatGenerator(
        client,
        model=settings.chat_model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    retriever = Retriever(embedder, store, threshold=settings.retrieval_threshold)
    streamer = ResponseStreamer(retriever, generator, top_k=settings.top_k)

    logger.info(
        "[services] Ready: backend=%s, index=%s, chat=%s, embeddings=%s (%dd)",
        engine.dialect.name,
        type(index).__name__,
        settings.chat_model,
        settings.embedding_model,
        settings.embedding_dimensions,
    )

    return RAGServices(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        client=client,
        store=store,
        embedder=embedder,
        generator=generator,
        retriever=retriever,
        streamer=streamer,
    )
