"""
Database connection and session management.

Backs both the rule store (``rules``) and the audit log (``blocking_log``).
Supports PostgreSQL (e.g. Supabase) in production and SQLite for local
development and tests. Sessions are synchronous; async callers run them in
a worker thread with a timeout (see ``services.rule_store``).
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from .core.config import Settings, settings

logger = logging.getLogger(__name__)

# Create base class for models
Base = declarative_base()


def create_db_engine(config: Settings) -> Engine:
    """Create an engine for ``config.DATABASE_URL`` with pooling for PostgreSQL."""
    if config.is_sqlite:
        return create_engine(
            config.DATABASE_URL,
            connect_args={"check_same_thread": False},
            echo=config.DEBUG,
        )

    db_engine = create_engine(
        config.DATABASE_URL,
        poolclass=QueuePool,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=config.DB_POOL_RECYCLE,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_use_lifo=True,
        echo=config.DEBUG,
        connect_args={
            "connect_timeout": 10,
            "options": "-c statement_timeout=30000",  # 30s query timeout
        },
    )

    @event.listens_for(db_engine, "connect")
    def receive_connect(dbapi_conn, connection_record):
        logger.debug("New database connection established")

    return db_engine


engine = create_db_engine(settings)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session(
    session_factory: sessionmaker = SessionLocal,
) -> Generator[Session, None, None]:
    """
    Get database session as a context manager.

    Usage:
        with get_db_session() as session:
            session.execute(select(Rule))
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_connection(bind: Engine | None = None) -> bool:
    """Return True if ``SELECT 1`` succeeds."""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False


def init_db(bind: Engine | None = None):
    """
    Initialize database - create all tables.
    Safe to call multiple times (idempotent).
    """
    # Registers the model classes on Base.metadata
    from . import models  # noqa: F401

    target = bind or engine
    try:
        with target.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        logger.error(f"DATABASE_URL: {str(target.url)[:30]}...")
        raise

    Base.metadata.create_all(bind=target)
    logger.info("Database tables created/verified")
