"""
Test configuration for the Beacon policy service.

Environment variables are set BEFORE any ``beacon`` import because settings
are read once at import time. The rule store and audit log use a throwaway
SQLite database; the completion backend is replaced by an ``AsyncMock``.
"""

import os
import tempfile
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

_TEST_DIR = tempfile.mkdtemp(prefix="beacon-tests-")

# Set test environment BEFORE importing modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR}/beacon_test.db"
os.environ["LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["AI_BACKEND"] = "ollama"
os.environ["AI_TEMPERATURE"] = "0"
os.environ["STORE_TIMEOUT"] = "5"

# Import after environment setup
from beacon.api.dependencies import get_pipeline, get_rule_store  # noqa: E402
from beacon.api.main import app  # noqa: E402
from beacon.core.config import Settings  # noqa: E402
from beacon.database import Base, SessionLocal, engine, init_db  # noqa: E402
from beacon.models import BlockingLog, Rule  # noqa: E402
from beacon.services.audit import AuditLogger  # noqa: E402
from beacon.services.completion import CompletionClient  # noqa: E402
from beacon.services.judge import AIJudge  # noqa: E402
from beacon.services.pipeline import DecisionPipeline  # noqa: E402
from beacon.services.rule_store import RuleStoreGateway  # noqa: E402

TEST_API_KEY = "bk_test_1234567890"
TEST_USER_ID = "user-1"

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (database, HTTP surface)"
    )


# =============================================================================
# SETTINGS & DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Fresh settings instance; tests may override attributes on it."""
    return Settings()


@pytest.fixture(scope="session")
def test_engine():
    """Create the SQLite schema once per session."""
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine) -> Generator[Session, None, None]:
    """Session on a clean database."""
    session = SessionLocal()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed_rule(db_session):
    """Insert a rule row; returns a factory accepting column overrides."""

    def _seed(**overrides) -> Rule:
        values = {
            "api_key": TEST_API_KEY,
            "user_id": TEST_USER_ID,
            "prompt": "Block social media and news.",
            "blocked_categories": {},
            "allow_list": [],
            "block_list": [],
        }
        values.update(overrides)
        rule = Rule(**values)
        db_session.add(rule)
        db_session.commit()
        db_session.refresh(rule)
        return rule

    return _seed


@pytest.fixture
def audit_rows(db_session):
    """Callable returning all audit rows, oldest first."""

    def _rows() -> list[BlockingLog]:
        db_session.expire_all()
        return db_session.query(BlockingLog).order_by(BlockingLog.id).all()

    return _rows


# =============================================================================
# COMPONENT FIXTURES
# =============================================================================


@pytest.fixture
def fake_completion() -> MagicMock:
    """Completion backend answering ALLOW unless a test says otherwise."""
    client = MagicMock(spec=CompletionClient)
    client.complete = AsyncMock(return_value="ALLOW")
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def rule_store(test_settings, db_session) -> RuleStoreGateway:
    return RuleStoreGateway(test_settings, SessionLocal)


@pytest.fixture
def audit_logger(test_settings, db_session) -> AuditLogger:
    return AuditLogger(test_settings, SessionLocal)


@pytest.fixture
def pipeline(test_settings, rule_store, audit_logger, fake_completion) -> DecisionPipeline:
    """Pipeline over the SQLite stores with a mocked completion backend."""
    return DecisionPipeline(
        rule_store=rule_store,
        judge=AIJudge(fake_completion, test_settings),
        audit=audit_logger,
    )


# =============================================================================
# API CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def client(pipeline, rule_store) -> Generator[TestClient, None, None]:
    """FastAPI test client wired to the test pipeline."""
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_rule_store] = lambda: rule_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def test_api_key() -> str:
    return TEST_API_KEY


@pytest.fixture
def auth_headers() -> dict:
    """Authorization header for the seeded test key."""
    return {"Authorization": f"Bearer {TEST_API_KEY}"}
