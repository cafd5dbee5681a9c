"""
Shared fixtures: an in-memory SQLite database, fake collaborators and
factories for users and employees.
"""

import base64
import os

# Settings are read at import time, so the environment must be in place first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("ENCRYPTION_KEY", base64.b64encode(b"k" * 32).decode("ascii"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("COOKIE_SECURE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hrportal.core.database import Base, get_db
from hrportal.core.encryption import FieldEncryptor
from hrportal.core.security import get_password_hash
from hrportal.models import announcement, audit_log, bank_details, document, password_reset_token, paystub, pto  # noqa: F401
from hrportal.models.employee import EmployeeProfile, OnboardingStatus
from hrportal.models.user import Role, User
from hrportal.services.auth import AuthService
from hrportal.services.rate_limiter import InMemoryRateLimitStore, RateLimiter

DEFAULT_PASSWORD = "correct-horse-9"


class FakeEmailSender:
    """Captures outgoing mail instead of sending it."""

    def __init__(self, result=True):
        self.sent = []
        self.result = result

    def send(self, to, subject, html, text=None):
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return self.result


class ManualClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class MemoryStorage:
    def __init__(self):
        self.files = {}

    def put(self, path, data, content_type):
        self.files[path] = (data, content_type)
        return f"/files/{path}"


class FakePdfRenderer:
    def __init__(self, fail=False):
        self.fail = fail
        self.rendered = []

    def render(self, data):
        if self.fail:
            raise RuntimeError("renderer exploded")
        self.rendered.append(data)
        return b"%PDF-1.4 fake"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(InMemoryRateLimitStore(), clock=clock)


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def encryptor():
    return FieldEncryptor()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def pdf_renderer():
    return FakePdfRenderer()


@pytest.fixture
def auth_service(db, rate_limiter, email_sender, encryptor):
    return AuthService(db, rate_limiter, email_sender, encryptor)


@pytest.fixture
def make_user(db):
    """Factory: ``make_user(email, role=Role.EMPLOYEE, password=DEFAULT_PASSWORD)``."""

    def _make(email, role=Role.EMPLOYEE, password=DEFAULT_PASSWORD):
        user = User(email=email.lower(), password_hash=get_password_hash(password), role=role, totp_enabled=False)
        if role == Role.EMPLOYEE:
            user.employee_profile = EmployeeProfile(onboarding_status=OnboardingStatus.NOT_STARTED)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("hr@example.com", role=Role.ADMIN)


@pytest.fixture
def employee_user(make_user):
    return make_user("alice@example.com")


@pytest.fixture
def employee(employee_user):
    return employee_user.employee_profile


@pytest.fixture
def client(db, rate_limiter, email_sender, encryptor, storage, pdf_renderer):
    from hrportal.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.rate_limiter = rate_limiter
    app.state.email_sender = email_sender
    app.state.encryptor = encryptor
    app.state.storage = storage
    app.state.pdf_renderer = pdf_renderer

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Log ``email`` in through the API and return bearer headers."""

    def _login(email, password=DEFAULT_PASSWORD):
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login
