"""Engine and session factory

The engine owns a bounded connection pool. Checkout blocks for up to
DB_POOL_TIMEOUT seconds when every connection is in use.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from app.core.config import settings


def build_engine(url: str, pool_size: int = None, pool_timeout: int = None) -> Engine:
    """Create an engine backed by a fixed-size QueuePool (no overflow)"""
    connect_args = {}
    if url.startswith("sqlite"):
        # Pooled sqlite connections are handed between request threads
        connect_args["check_same_thread"] = False

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size or settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=pool_timeout or settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
