"""Pytest configuration and fixtures."""

import os

# Configure the app for tests before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import Callable, Generator
from contextlib import ExitStack
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

import quizmentor.models  # noqa: F401
from quizmentor.core.config import settings
from quizmentor.core.database import Base, build_engine, get_db
from quizmentor.main import app, create_app
from quizmentor.models import Language, Quiz, User, UserRole

API = "/api/v1"

# Test database (in-memory SQLite on a single shared connection)
test_engine = build_engine("sqlite://")

TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, Any, None]:
    """Create a test client with database session."""

    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., dict]:
    """Register a user through the API and return the response body."""

    def _register(
        email: str = "student@example.com",
        password: str = "secret123",
        name: str = "Test Student",
        **extra: Any,
    ) -> dict:
        payload = {"name": name, "email": email, "password": password, **extra}
        response = client.post(f"{API}/user/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def student(register_user: Callable[..., dict]) -> dict:
    """A registered student: response body plus ready-made auth headers."""
    body = register_user()
    return {**body, "headers": auth_headers(body["token"])}


@pytest.fixture
def make_quiz(db_session: Session) -> Callable[..., Quiz]:
    """Insert a quiz straight into the catalog."""

    def _make_quiz(
        title: str = "Sample Quiz",
        difficulty_level: int = 1,
        language: Language = Language.ENGLISH,
        description: str = "A quiz for testing",
    ) -> Quiz:
        quiz = Quiz(
            title=title,
            description=description,
            difficulty_level=difficulty_level,
            language=language,
        )
        db_session.add(quiz)
        db_session.commit()
        db_session.refresh(quiz)
        return quiz

    return _make_quiz


@pytest.fixture
def set_role(db_session: Session) -> Callable[[int, UserRole], None]:
    def _set_role(user_id: int, role: UserRole) -> None:
        user = db_session.get(User, user_id)
        user.role = role
        db_session.commit()

    return _set_role


@pytest.fixture
def build_client(
    db_session: Session, monkeypatch: pytest.MonkeyPatch
) -> Generator[Callable[..., TestClient], None, None]:
    """Build a separate app with some settings changed, sharing the test database"""
    with ExitStack() as stack:

        def _build(**overrides: Any) -> TestClient:
            for name, value in overrides.items():
                monkeypatch.setattr(settings, name, value)

            custom_app = create_app()

            def override_get_db() -> Generator[Session, None, None]:
                yield db_session

            custom_app.dependency_overrides[get_db] = override_get_db
            return stack.enter_context(TestClient(custom_app))

        yield _build
