"""
Shared fixtures: in-memory database, temporary blob store, users and an HTTP client.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from correspondence.core.security import create_access_token
from correspondence.db.base import Base
from correspondence.db.init_db import seed_defaults
from correspondence.db.session import build_engine, build_session_factory, get_db
from correspondence.main import create_app
from correspondence.models import Letter, LetterType, User
from correspondence.models.user import ROLE_ADMIN, ROLE_STAFF
from correspondence.security.rate_limit import login_throttle
from correspondence.services.letters import LetterService
from correspondence.services.storage import LocalBlobStorage, get_storage


class FakeClock:
    """Deterministic stand-in for time.time(); advances one second per call."""

    def __init__(self, start: float = 1_700_000_000):
        self.now = start

    def __call__(self) -> float:
        current = self.now
        self.now += 1
        return current


class FailingStorage(LocalBlobStorage):
    """Stores ``fail_after`` blobs normally, then every further write raises."""

    def __init__(self, root, fail_after: int = 0):
        super().__init__(root)
        self.remaining = fail_after

    def store(self, data, namespace, filename):
        if self.remaining <= 0:
            raise OSError("disk full")
        self.remaining -= 1
        return super().store(data, namespace, filename)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = build_session_factory(engine)
    db = factory()
    seed_defaults(db)
    db.close()
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalBlobStorage(tmp_path / "storage")


@pytest.fixture
def failing_storage(tmp_path):
    """Builds a FailingStorage over the same root as ``storage``."""
    def _make(fail_after: int = 0) -> FailingStorage:
        return FailingStorage(tmp_path / "storage", fail_after=fail_after)

    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(db, storage, clock):
    return LetterService(db, storage, clock=clock, locale="en")


def _user(db, name: str, role: str) -> User:
    # Password hashing is exercised in the auth tests; a placeholder keeps these fast
    user = User(name=name, email=f"{name.lower()}@example.com", password_hash="!", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return _user(db, "Admin", ROLE_ADMIN)


@pytest.fixture
def staff_a(db):
    return _user(db, "Alice", ROLE_STAFF)


@pytest.fixture
def staff_b(db):
    return _user(db, "Bob", ROLE_STAFF)


@pytest.fixture
def make_letter(db):
    """Insert a letter directly, bypassing the service."""
    counter = {"n": 0}

    def _make(user: User, **overrides) -> Letter:
        counter["n"] += 1
        fields = {
            "reference_number": f"REF/{counter['n']:03d}",
            "agenda_number": f"{counter['n']:03d}",
            "sender": "Ministry of Works",
            "recipient": None,
            "letter_date": date(2026, 1, counter["n"] % 28 + 1),
            "received_date": date(2026, 1, counter["n"] % 28 + 1),
            "description": f"Letter number {counter['n']}",
            "type": LetterType.INCOMING.value,
            "classification_code": "STAFF",
            "user_id": user.id,
        }
        fields.update(overrides)
        letter = Letter(**fields)
        db.add(letter)
        db.commit()
        db.refresh(letter)
        return letter

    return _make


@pytest.fixture
def letter_form():
    """A valid create-form body."""
    return {
        "type": "incoming",
        "reference_number": "IN/2026/001",
        "agenda_number": "001",
        "sender": "City Council",
        "recipient": "",
        "letter_date": "2026-02-03",
        "received_date": "2026-02-04",
        "description": "Invitation to the budget hearing",
        "note": "",
        "classification_code": "STAFF",
    }


@pytest.fixture
def client(session_factory, storage):
    app = create_app(initialize_db=False)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}

    return _headers


@pytest.fixture(autouse=True)
def _reset_login_throttle():
    login_throttle.reset()
    yield
    login_throttle.reset()
