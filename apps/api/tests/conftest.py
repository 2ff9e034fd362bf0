"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. Each test gets freshly
created tables, dropped again afterwards, so nothing leaks between tests.
"""
import os
import sys

# Settings are read at import time, so the environment has to be in place first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only-0123456789")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from uuid import uuid4  # noqa: E402

from core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from core.security import create_access_token, get_password_hash  # noqa: E402
from models import AthleteProfile, CoachProfile, School, User  # noqa: E402
from services.profile_service import calculate_completeness  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"

# bcrypt is slow on purpose; hash once for every fixture user.
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test."""
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's session."""
    from main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Bearer headers for a user: `auth_headers(user)`."""
    return _auth_headers


@pytest.fixture
def make_user(db_session):
    def _make(role: str, email: str = None) -> User:
        user = User(
            email=email or f"{role}_{uuid4().hex[:8]}@example.com",
            password_hash=_PASSWORD_HASH,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_school(db_session):
    def _make(name: str = None, state: str = "OH") -> School:
        school = School(
            name=name or f"School {uuid4().hex[:6]}",
            division="D1",
            city="Columbus",
            state=state,
        )
        db_session.add(school)
        db_session.commit()
        return school

    return _make


@pytest.fixture
def make_athlete(db_session, make_user):
    """Athlete user with a profile; keyword args override profile fields."""
    def _make(**fields) -> User:
        user = make_user("athlete")
        values = dict(
            first_name="Jordan",
            last_name="Smith",
            sport="Basketball",
            positions=["PG"],
            grad_year=2026,
            city="Dayton",
            state="OH",
            gpa=3.5,
            is_public=True,
        )
        values.update(fields)
        profile = AthleteProfile(user_id=user.id, **values)
        profile.completeness_score = calculate_completeness(profile)
        db_session.add(profile)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_coach(db_session, make_user, make_school):
    """Coach user with a profile linked to a school (a new one unless given)."""
    def _make(verified: bool = True, school: School = None) -> User:
        user = make_user("coach")
        school = school or make_school()
        db_session.add(
            CoachProfile(
                user_id=user.id,
                school=school.name,
                school_id=school.id,
                title="Head Coach",
                sports=["Basketball"],
                verification_status="verified" if verified else "pending",
            )
        )
        db_session.commit()
        return user

    return _make


@pytest.fixture
def athlete(make_athlete):
    return make_athlete()


@pytest.fixture
def coach(make_coach):
    return make_coach(verified=True)


@pytest.fixture
def unverified_coach(make_coach):
    return make_coach(verified=False)


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def lookup_misses_once(monkeypatch):
    """
    Make a get-or-create lookup miss on its first call, as if another request
    inserted the same row between the lookup and the insert.
    """
    def _patch(module, name: str) -> list:
        real = getattr(module, name)
        calls = []

        def lookup(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real(*args, **kwargs)

        monkeypatch.setattr(module, name, lookup)
        return calls

    return _patch
