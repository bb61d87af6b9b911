"""
Test configuration and fixtures.

Provides:
- An isolated SQLite database per test (schema from Base.metadata)
- Bearer token minting for authenticated tests
- HTTPX AsyncClient wired to the app with get_db overridden
- Media directories under tmp_path
"""
import os
from dataclasses import dataclass
from datetime import date, timedelta
from typing import AsyncGenerator, Generator

# Settings are read at import time; configure the test environment first.
os.environ["TESTING"] = "1"
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DB_AUTO_MIGRATE"] = "false"
os.environ["EMAIL_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session, sessionmaker

from fortyweeks.core.config import settings
from fortyweeks.core.deps import get_db
from fortyweeks.core.security import create_access_token, hash_password
from fortyweeks.db.base import Base
from fortyweeks.db.models import Pregnancy, User
from fortyweeks.db.session import build_engine
from fortyweeks.main import app
from fortyweeks.services import pregnancy_service


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine(tmp_path):
    """A fresh SQLite file per test, created from the ORM metadata."""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def media_dirs(tmp_path, monkeypatch):
    """Point uploads at the test's temp directory."""
    images = tmp_path / "images"
    videos = tmp_path / "videos"
    images.mkdir()
    videos.mkdir()
    monkeypatch.setattr(settings, "IMAGES_DIRECTORY", str(images))
    monkeypatch.setattr(settings, "VIDEOS_DIRECTORY", str(videos))
    return images, videos


def make_user(db: Session, name: str, email: str, is_admin: bool = False) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password("password123"),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db: Session) -> User:
    return make_user(db, "Jane Doe", "jane@example.com")


@pytest.fixture(scope="function")
def test_pregnancy(db: Session, test_user: User) -> Pregnancy:
    """Active pregnancy due in 20 weeks (so roughly week 20 today)."""
    pregnancy = pregnancy_service.create_pregnancy(
        db,
        user_id=test_user.id,
        due_date=date.today() + timedelta(weeks=20),
        partner_name="Sam Smith",
        baby_name="Peanut",
    )
    db.commit()
    db.refresh(pregnancy)
    return pregnancy


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def auth_for(user: User) -> TestAuth:
    return TestAuth(user=user, token=create_access_token(user.id, user.name, user.is_admin))


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    return auth_for(test_user)


@pytest.fixture(scope="function")
def user_factory(db: Session):
    """Create extra users and return (user, auth) pairs."""
    def _create(name: str, email: str, is_admin: bool = False) -> TestAuth:
        return auth_for(make_user(db, name, email, is_admin))
    return _create


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client for public endpoints."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """Client sending the test user's bearer token."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=test_auth.headers,
    ) as c:
        yield c

    app.dependency_overrides.clear()
