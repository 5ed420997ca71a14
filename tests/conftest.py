"""
Pytest configuration and fixtures for the case-notes tests.
"""

import os

# keep the app's own engine off disk; tests bind their own below
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from casenotes.main import app
from casenotes.core.dependencies import get_attachment_storage, get_db
from casenotes.db.base import Base
from casenotes.utils.storage import LocalDiskStorage


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """A session shared by the test body and every request it makes."""
    TestSessionLocal = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestSessionLocal()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalDiskStorage(str(tmp_path / "uploads"))


@pytest.fixture(scope="function")
def client(db_session, storage):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_attachment_storage] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()


def identity_headers(user_id, first_name=None, last_name=None, email=None):
    headers = {"X-User-Id": user_id}
    if first_name:
        headers["X-User-First-Name"] = first_name
    if last_name:
        headers["X-User-Last-Name"] = last_name
    if email:
        headers["X-User-Email"] = email
    return headers


@pytest.fixture
def author_headers():
    return identity_headers("cw-1", "Amina", "Chen", "amina.chen@example.org")


@pytest.fixture
def other_headers():
    return identity_headers("cw-2", "David", "Johnson", "david.johnson@example.org")
