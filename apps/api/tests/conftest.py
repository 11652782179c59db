"""
Shared fixtures: in-memory SQLite sessions and a TestClient wired to them.
"""
import os
import tempfile
from uuid import uuid4

# Must be set before config/db.session are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CHEFOS_LOG_DIR", tempfile.mkdtemp(prefix="chefos-logs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base


@pytest.fixture
def test_db():
    """In-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def org_id():
    return uuid4()


@pytest.fixture
def user_ids():
    """Create test user IDs."""
    return {
        "alice": uuid4(),
        "bob": uuid4(),
        "manager": uuid4(),
    }


@pytest.fixture
def client_db():
    """Session factory over one shared in-memory database (usable across threads)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


@pytest.fixture
def client(client_db):
    """TestClient whose get_session dependency uses client_db."""
    from db.session import get_session
    from main import app

    def override_get_session():
        session = client_db()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
