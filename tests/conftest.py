"""Pytest fixtures."""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from safetrail.core.deps import get_sos_dispatcher
from safetrail.db.base import Base
from safetrail.models import LocationPing, SosEvent, SosSendResult, User  # noqa: F401 - register for create_all
from safetrail.main import app
from safetrail.db.session import get_db
from safetrail.services.sms_service import SendResult, SmsSender
from safetrail.services.sos_service import SosDispatcher

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeSmsSender(SmsSender):
    """Records every send; contacts in `failing` get a normalized failure."""

    name = "fake"

    def __init__(self, failing=None, raising=None):
        self.failing = set(failing or [])
        self.raising = set(raising or [])
        self.calls: list[tuple[str, str]] = []

    def send(self, recipient, text):
        self.calls.append((recipient, text))
        if recipient in self.raising:
            raise RuntimeError(f"transport exploded for {recipient}")
        if recipient in self.failing:
            return SendResult(success=False, error_reason="invalid number", response={"return": False, "status_code": 411})
        return SendResult(
            success=True,
            provider_ref=f"req-{len(self.calls)}",
            response={"return": True, "request_id": f"req-{len(self.calls)}"},
        )


@pytest.fixture(scope="session")
def setup_db():
    """Create tables once for test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sms_sender():
    return FakeSmsSender()


@pytest.fixture
def client(setup_db, sms_sender):
    """Test client with overridden DB and a fake SMS transport."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sos_dispatcher] = lambda: SosDispatcher(sms_sender)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Sign up a user with unique email; optionally set contacts. Returns userId."""

    def _make(contacts=None, name="Asha", password="pass123"):
        email = f"user_{uuid.uuid4().hex[:10]}@test.com"
        r = client.post(
            "/api/signup",
            json={"name": name, "email": email, "phone": "9999999999", "password": password},
        )
        assert r.status_code == 200, r.text
        user_id = r.json()["userId"]
        if contacts is not None:
            client.post("/api/contacts", json={"userId": user_id, "contacts": contacts})
        return user_id

    return _make


@pytest.fixture
def install_sender(client):
    """Swap the dispatcher's transport for a FakeSmsSender built from kwargs."""

    def _install(**kwargs):
        sender = FakeSmsSender(**kwargs)
        app.dependency_overrides[get_sos_dispatcher] = lambda: SosDispatcher(sender)
        return sender

    return _install


@pytest.fixture
def make_sender():
    return FakeSmsSender
