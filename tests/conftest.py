"""
Shared test fixtures for all test modules.

Provides:
- db_session: SQLite in-memory database session, fresh for every test
- make_user / make_idea factories
- client: FastAPI TestClient bound to the test session
- Test environment setup (secrets, mail disabled)
"""

import os
from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# =============================================================================
# Test Environment Configuration
# =============================================================================

os.environ["JWT_SECRET"] = "test-secret-key-for-testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_URL"] = "http://testserver"
for var in ("MS_CLIENT_ID", "MS_CLIENT_SECRET", "MS_TENANT_ID", "MS_SENDER_EMAIL", "NOTIFICATION_EMAIL"):
    os.environ[var] = ""

from featureboard.core.db import Base, get_db  # noqa: E402
import featureboard.models.comment  # noqa: E402,F401
import featureboard.models.email_log  # noqa: E402,F401
import featureboard.models.email_template  # noqa: E402,F401
import featureboard.models.verification  # noqa: E402,F401
import featureboard.models.vote  # noqa: E402,F401
from featureboard.models.idea import Idea, IdeaStatus  # noqa: E402
from featureboard.models.user import ROLE_ADMIN, ROLE_CLIENT, User  # noqa: E402
from featureboard.services.identity import create_access_token  # noqa: E402


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db_session():
    """Fresh in-memory database with all tables for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()

    yield session

    session.close()
    engine.dispose()


# =============================================================================
# Factories
# =============================================================================

def as_viewer(user: User) -> dict:
    """Same shape as the get_current_user dependency returns."""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.display_name,
        "role": user.role,
        "is_admin": user.role == ROLE_ADMIN,
        "created_at": user.created_at,
    }


@pytest.fixture
def make_user(db_session):
    def _make(name="Client", role=ROLE_CLIENT, email=None, **fields):
        fields.setdefault("created_at", datetime.utcnow())
        user = User(
            id=str(uuid4()),
            email=email or f"{name.lower().replace(' ', '.')}.{uuid4().hex[:6]}@example.com",
            hashed_password="not-a-real-hash",
            first_name=name,
            last_name="Tester",
            display_name=f"{name} Tester",
            role=role,
            **fields
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_viewer(make_user):
    def _make(name="Client", role=ROLE_CLIENT, **fields):
        return as_viewer(make_user(name, role=role, **fields))

    return _make


@pytest.fixture
def admin(make_user):
    return as_viewer(make_user("Admin", role=ROLE_ADMIN))


@pytest.fixture
def alice(make_user):
    return as_viewer(make_user("Alice"))


@pytest.fixture
def bob(make_user):
    return as_viewer(make_user("Bob"))


@pytest.fixture
def make_idea(db_session):
    """Insert an idea directly, bypassing validation, with controllable timestamps."""
    counter = {"n": 0}

    def _make(author, title=None, status=IdeaStatus.PRIVATE.value, is_public=False,
              vote_count=0, created_at=None, updated_at=None, **fields):
        counter["n"] += 1
        created = created_at or (datetime(2024, 1, 1) + timedelta(minutes=counter["n"]))
        fields.setdefault("description", "A description long enough to pass validation.")
        idea = Idea(
            id=str(uuid4()),
            title=title or f"Idea {counter['n']}",
            author_id=author["id"],
            author_name=author.get("name"),
            status=status,
            is_public=is_public,
            vote_count=vote_count,
            comment_count=0,
            created_at=created,
            updated_at=updated_at or created,
            last_status_update=created,
            **fields
        )
        db_session.add(idea)
        db_session.commit()
        return idea

    return _make


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from featureboard.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(db_session):
    def _headers(viewer: dict) -> dict:
        user = db_session.get(User, viewer["id"])
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers
