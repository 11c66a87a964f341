"""Pytest configuration and fixtures."""

import os
import pytest

# Set environment variables before imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SALT"] = "test-salt"
os.environ["API_KEY"] = "test-api-key"
os.environ["RETENTION_DAYS"] = "90"
os.environ["RETENTION_SWEEP_INTERVAL_SECONDS"] = "0"

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ALLOWED_ORIGIN = "https://blog.example.com"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session in a test."""
    from visitor_stats.database import bootstrap_database

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    bootstrap_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def allowed_origin(session_factory):
    """Puts ALLOWED_ORIGIN on the allow-list."""
    from visitor_stats.services.stats_store import set_allowed_origins

    session = session_factory()
    set_allowed_origins(session, [ALLOWED_ORIGIN])
    session.commit()
    session.close()
    return ALLOWED_ORIGIN


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def total_cache(fake_clock):
    from visitor_stats.services.cache_service import ResponseCache

    return ResponseCache(ttl_seconds=60, timer=fake_clock)


@pytest.fixture
def client(session_factory, total_cache, allowed_origin):
    """TestClient wired to the test database and cache."""
    from fastapi.testclient import TestClient
    from visitor_stats.database import get_db
    from visitor_stats.main import app
    from visitor_stats.services.cache_service import get_total_cache

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_total_cache] = lambda: total_cache

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def origin_headers():
    return {"Origin": ALLOWED_ORIGIN}


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-api-key"}
