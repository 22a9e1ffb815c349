# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from offer_service.main import app
from offer_service.api import deps
from offer_service.core.clock import FixedClock
from offer_service.db.session import get_db
from offer_service.db.sqlalchemy_adapter import SQLAlchemyAdapter
from offer_service.models import Base
from offer_service.schemas.token import TokenPayload

from tests.utils.offers import NOW, USER_ID


# --- Test Database Setup ---
# One in-memory SQLite database shared by every connection in the pool.
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def clock():
    return FixedClock(NOW)


@pytest.fixture(scope="function")
def adapter(db):
    return SQLAlchemyAdapter(db)


# --- Mock Dependencies Setup ---
def override_get_current_user():
    return TokenPayload(sub=USER_ID, exp=9999999999)


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def client(db, clock):
    """
    Provides a TestClient backed by the test database, with auth and the
    clock overridden.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_current_user] = override_get_current_user
    app.dependency_overrides[deps.get_clock] = lambda: clock

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
