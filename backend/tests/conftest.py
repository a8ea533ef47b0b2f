"""
Shared fixtures: in-memory SQLite database and a FastAPI TestClient wired to it.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ebom.core.database import get_db, init_db
from ebom.main import app
from ebom.models.material import Material


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionTesting()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_materials(db):
    """Steel / Aluminum / ABS catalog used across tests."""
    db.add_all([
        Material(label="Steel", emission_factor=1.8),
        Material(label="Aluminum", emission_factor=9.1),
        Material(label="ABS", emission_factor=3.2),
    ])
    db.commit()
    return db


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
