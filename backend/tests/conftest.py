"""
Test configuration and shared fixtures for the case log test suite.

Each test gets a fresh in-memory SQLite database built from the models. The
application's ``get_db`` dependency is overridden to hand out the test
session, so API calls and direct service calls see the same data.
"""

import os
import tempfile

# Must be set before any application module reads core.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="caselog-uploads-")
os.environ["SETUP_SECRET"] = "test-setup-secret"

import pytest
from typing import Callable, Dict, Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, get_db
from main import app

# Import all models to ensure they're registered with SQLAlchemy before create_all
from models import User

from tests.utils import auth_headers_for, create_user


@pytest.fixture(scope="function")
def db_engine():
    """
    Create an in-memory database for one test.

    StaticPool keeps a single connection so the schema survives across
    sessions. pysqlite's own transaction handling is disabled so SQLAlchemy
    emits BEGIN itself and SAVEPOINTs nest inside it.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):  # type: ignore
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):  # type: ignore
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session matching the application's session settings."""
    TestingSession = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = TestingSession()

    yield session

    session.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client whose requests use the test session."""
    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def user(db_session: Session) -> User:
    return create_user(db_session, "oidc|alice", "alice@example.com", first_name="Alice", last_name="Chen")


@pytest.fixture
def other_user(db_session: Session) -> User:
    return create_user(db_session, "oidc|bob", "bob@example.com", first_name="Bob", last_name="Smith")


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return create_user(
        db_session, "oidc|admin", "admin@example.com", role="admin", first_name="Ada", last_name="Admin"
    )


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers_for


@pytest.fixture
def auth_headers(user: User) -> Dict[str, str]:
    return auth_headers_for(user)


@pytest.fixture
def other_headers(other_user: User) -> Dict[str, str]:
    return auth_headers_for(other_user)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return auth_headers_for(admin_user)


@pytest.fixture
def sample_case_data() -> Dict[str, str]:
    """Minimal valid case body."""
    return {
        "anesthesiaType": "General anesthesia",
        "caseDate": "2024-01-15",
        "status": "in_progress",
    }
