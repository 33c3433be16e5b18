import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.session import Database
from app.main import create_app
from app.models.base import Base
from app.models.author import Author
from app.repos.author_repo import AuthorRepository

# Shared in-memory database; StaticPool keeps the single connection alive
# across the threadpool that serves sync endpoints.
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def database():
    """Create the test database once for the whole run."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    db = Database(engine)
    yield db
    Base.metadata.drop_all(bind=engine)
    db.dispose()


@pytest.fixture(scope="session")
def app(database):
    return create_app(database=database, settings=Settings(log_level="WARNING"))


@pytest.fixture(autouse=True)
def clean_authors(database):
    """Start every test from an empty authors table."""
    session = database.session()
    try:
        AuthorRepository.truncate(session)
    finally:
        session.close()


@pytest.fixture
def db_session(database):
    """Create a fresh database session for each test."""
    session = database.session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def test_client(app):
    """Create a test client for FastAPI app."""
    return TestClient(app)


@pytest.fixture
def unavailable_database():
    """A handle whose every connection attempt fails."""
    engine = create_engine(
        f"sqlite+pysqlite:////nonexistent-{uuid.uuid4().hex}/authors.db",
        future=True,
    )
    db = Database(engine)
    yield db
    db.dispose()


@pytest.fixture
def unavailable_client(unavailable_database):
    app = create_app(
        database=unavailable_database, settings=Settings(log_level="WARNING")
    )
    return TestClient(app)


@pytest.fixture
def sample_author(test_client):
    """Create a sample author for testing using the API."""
    unique_suffix = uuid.uuid4().hex[:8]
    response = test_client.post(
        "/authors",
        json={"name": f"Author {unique_suffix}", "bio": "A test bio"},
    )
    assert response.status_code == 201, f"Failed to create sample author: {response.text}"
    return response.json()


@pytest.fixture
def sample_author_model(db_session):
    """Create a sample author model for repository tests."""
    author = Author(name="Repo Author", bio="Written straight to the table")
    db_session.add(author)
    db_session.commit()
    db_session.refresh(author)
    return author


@pytest.fixture
def headers_with_correlation():
    """HTTP headers with correlation ID."""
    return {"X-Request-ID": str(uuid.uuid4())}
