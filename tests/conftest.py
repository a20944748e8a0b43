"""
Pytest fixtures for the PJ Motors API tests.

Provides an in-memory database, a temporary uploads root and a test client
wired to both through dependency overrides.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pjmotors import schemas
from pjmotors.crud import create_car
from pjmotors.database import Base
from pjmotors.dependencies import get_db, get_file_store
from pjmotors.main import app
from pjmotors.storage import FileStore

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope='function')
def db_session():
    """Fresh schema for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope='function')
def file_store(tmp_path):
    return FileStore(tmp_path / "uploads")


@pytest.fixture(scope='function')
def client(db_session, file_store):
    """Test client; each request gets its own session on the shared engine."""
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: file_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope='function')
def prius(db_session):
    """An unsold Prius still in Japan."""
    return create_car(db_session, schemas.CarCreate.model_validate({
        "chassisCode": "ZVW51-0001",
        "make": "Toyota",
        "model": "Prius",
        "totalPurchasePriceAUD": 18000,
    }))
