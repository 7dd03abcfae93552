from __future__ import annotations

import os

# Set before townlink.db builds its module-level engine.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

import townlink.models  # noqa: F401
from townlink.db import Base, engine_options
import townlink.db as db_module
import townlink.api as api_module
from townlink.models import STATUS_APPROVED, Business


ADMIN_KEY = "test-admin-key"


@pytest.fixture(scope="session")
def test_database_url(tmp_path_factory) -> str:
    url = os.getenv("TOWNLINK_TEST_DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{tmp_path_factory.mktemp('db') / 'townlink-test.sqlite'}"


@pytest.fixture(scope="session")
def test_engine(test_database_url: str):
    engine = create_engine(test_database_url, **engine_options(test_database_url))
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def _bind_test_db(monkeypatch, test_engine):
    TestSessionLocal = sessionmaker(bind=test_engine, expire_on_commit=False)
    monkeypatch.setattr(db_module, "_engine", test_engine, raising=False)
    monkeypatch.setattr(db_module, "SessionLocal", TestSessionLocal, raising=False)
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session() -> Session:
    session = db_module.SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture
def business_fields() -> dict:
    return {
        "name": "Corner Bakery",
        "category": "food",
        "location": "12 Main St",
        "description": "Fresh bread every morning.",
    }


@pytest.fixture
def approved_business(db_session: Session) -> Business:
    row = Business(
        name="Harbor Books",
        category="retail",
        location="3 Quay Rd",
        description="Second-hand books.",
        status=STATUS_APPROVED,
    )
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def admin_headers() -> dict:
    return {"x-admin-key": ADMIN_KEY}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("ADMIN_KEY", ADMIN_KEY)
    app = api_module.create_app()
    with TestClient(app) as test_client:
        yield test_client
