"""
Pytest configuration and fixtures for testing.
"""

import os

# Settings are cached on first use, so the test environment must be set before
# any application module is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SERPAPI_KEY"] = "test-serpapi-key"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-api-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-api-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from typing import Callable, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from image_checker.config import get_settings
from image_checker.db.database import Database
from image_checker.main import app
from image_checker.models.check_result import CheckOutcome
from image_checker.schemas.check_result import CheckResultCreate


@pytest.fixture(scope="function")
def test_database() -> Generator[Database, None, None]:
    """Fresh in-memory SQLite database with all tables created."""
    database = Database("sqlite://")
    database.init()
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture(scope="function")
def test_db(test_database: Database) -> Generator[Session, None, None]:
    """Create test database session."""
    session = test_database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(test_database: Database) -> Generator[TestClient, None, None]:
    """Create test client backed by the in-memory test database."""
    app.state.database = test_database
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.state.database = None


@pytest.fixture
def make_submission() -> Callable[..., CheckResultCreate]:
    """Factory for valid check result submissions."""
    def factory(
        image_url: str = "https://res.cloudinary.com/test-cloud/image/upload/sample.jpg",
        social_media_name: str = "instagram",
        result: CheckOutcome = CheckOutcome.REAL,
        confidence: float = 0.92,
        **extra
    ) -> CheckResultCreate:
        return CheckResultCreate(
            image_url=image_url,
            social_media_name=social_media_name,
            result=result,
            confidence=confidence,
            **extra
        )
    return factory


@pytest.fixture
def descriptor_length() -> int:
    """Configured face descriptor length."""
    return get_settings().face_descriptor_length


@pytest.fixture
def make_descriptor(descriptor_length: int) -> Callable[[float], List[float]]:
    """Factory for descriptors with every component set to ``value``."""
    def factory(value: float) -> List[float]:
        return [value] * descriptor_length
    return factory
