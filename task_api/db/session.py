import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session, SQLModel

logger = logging.getLogger(__name__)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Build the one engine the process holds for its lifetime."""
    # --- CONFIGURATION FOR SQLITE ---
    if url.startswith("sqlite"):
        # Sessions are used from FastAPI's worker threads
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})

    # --- CONFIGURATION FOR POSTGRESQL ---
    # Ensure URL starts with postgresql:// (uses psycopg2-binary)
    url = url.replace("postgres://", "postgresql://", 1)
    return create_engine(url, echo=echo, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    # Import models so their tables are registered on the metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ready")


# Dependency: one session per request, bound to the engine set up at startup
def get_session(request: Request) -> Iterator[Session]:
    with Session(request.app.state.engine) as session:
        yield session
