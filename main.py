# FILE: main.py
"""
RAG Chat Backend - FastAPI Application
Version: 0.1.0

Features:
- Document ingestion: chunking, embedding and vector storage
- Retrieval-augmented chat streamed as server-sent events
- Similar-document lookup over stored embeddings
- SQLite (full scan) or PostgreSQL + pgvector storage
"""

import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from ragchat import __version__
from ragchat.config import get_settings
from ragchat.rag.router import router as rag_router
from ragchat.services import build_services

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="RAG Chat",
    version=__version__,
    description="Retrieval-augmented chat backend with streamed answers",
)


# ====== CORS ======

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== STARTUP ======

@app.on_event("startup")
def on_startup():
    if settings.database_url.startswith("sqlite"):
        os.makedirs("data", exist_ok=True)

    # Services may already be attached (e.g. by an embedding host)
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)

    logger.info("[startup] Checking environment variables...")
    if settings.openai_api_key:
        logger.info("[startup] OPENAI_API_KEY: [OK] set (enables chat + embeddings)")
    else:
        logger.warning("[startup] OPENAI_API_KEY: [X] NOT SET - chat and ingestion will fail")
    if settings.openai_base_url:
        logger.info("[startup] OPENAI_BASE_URL: %s", settings.openai_base_url)

    logger.info("[startup] Chat model: %s", settings.chat_model)
    logger.info(
        "[startup] Embedding model: %s (%d dimensions)",
        settings.embedding_model, settings.embedding_dimensions,
    )


# ====== ROUTERS ======

app.include_router(rag_router)


# ====== HEALTH ======

@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=int(os.getenv("PORT", "8000")))
