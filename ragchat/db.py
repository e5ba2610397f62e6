# FILE: ragchat/db.py
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the engine for ``database_url``. SQLite gets cross-thread access."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # Required for SQLite
    return create_engine(
        database_url,
        connect_args=connect_args,
        echo=echo,  # Set True to log SQL statements for debugging
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine, dimensions: Optional[int] = None) -> None:
    """Create all tables. Call once at startup.

    ``dimensions`` overrides the vector column width read from the environment.
    """
    # Import models so Base.metadata knows about them
    from ragchat.embeddings import models
    if dimensions is not None:
        models.set_embedding_dimensions(dimensions)
    Base.metadata.create_all(bind=engine)
