"""
Shared test fixtures and utilities.

Every test runs against a fresh in-memory SQLite database. The API client
overrides the database session, media storage and e-mail dependencies, so no
external service is contacted.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"

import pytest
from typing import List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import reset_settings
from app.database import Base, get_db, enable_sqlite_foreign_keys
from app.main import app
from app.models import User, UnitMember, Task
from app.models.enums import UnitRole, MemberStatus, TaskStatus
from app.services.media_storage import (
    MediaStorage,
    PresignedUpload,
    get_optional_media_storage,
)
from app.dependencies.services import get_email_service
from app.utils.email import EmailService
from app.utils.security import create_access_token


class FakeMediaStorage(MediaStorage):
    """In-memory storage backend that records what it was asked to do"""

    def __init__(self):
        self.issued: List[str] = []
        self.deleted: List[str] = []

    def create_upload_url(
        self, storage_key: str, content_type: str, expires_in: int
    ) -> PresignedUpload:
        self.issued.append(storage_key)
        return PresignedUpload(
            upload_url=f"https://uploads.test/{storage_key}?signature=fake",
            file_url=f"https://media.test/{storage_key}",
            storage_key=storage_key,
            expires_in=expires_in,
        )

    def delete_objects(self, storage_keys: List[str]) -> None:
        self.deleted.extend(storage_keys)


def create_test_token(user: User, expired: bool = False) -> str:
    """Create a signed access token for a user."""
    return create_access_token(user.id, expires_minutes=-5 if expired else 30)


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_test_token(user)}"}


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are re-read from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture
def email_service() -> EmailService:
    return EmailService()


@pytest.fixture
def client(db_session, storage, email_service):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_optional_media_storage] = lambda: storage
    app.dependency_overrides[get_email_service] = lambda: email_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory inserting users directly; the password hash is a placeholder."""
    counter = {"n": 0}

    def _make_user(
        username: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            phone=phone,
            hashed_password="not-a-real-hash",
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def add_member(db_session):
    """Attach a user to a unit with the given role and status."""

    def _add_member(
        unit_id: int,
        user: User,
        role: str = UnitRole.MEMBER.value,
        status: str = MemberStatus.ACTIVE.value,
    ) -> UnitMember:
        membership = UnitMember(
            user_id=user.id, unit_id=unit_id, role=role, status=status
        )
        db_session.add(membership)
        db_session.commit()
        db_session.refresh(membership)
        return membership

    return _add_member


@pytest.fixture
def make_task(db_session):
    def _make_task(
        unit_id: int,
        creator: User,
        assignee: Optional[User] = None,
        title: str = "Take out the trash",
        status: str = TaskStatus.PENDING.value,
    ) -> Task:
        task = Task(
            title=title,
            unit_id=unit_id,
            creator_id=creator.id,
            assignee_id=assignee.id if assignee else None,
            status=status,
        )
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task

    return _make_task
