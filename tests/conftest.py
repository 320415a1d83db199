# tests/conftest.py

import os

# Settings are read at import time, so the environment must be in place first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["BREVO_API_KEY"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mrkim.main import app
from mrkim.core.database import Base, get_db
from mrkim.core.security import get_password_hash
from mrkim.models.otp import OTPRecord, OTPType
from mrkim.models.user import Role, User
from mrkim.services.notifier import get_code_sender


class RecordingSender:
    """Stands in for the email/SMS sender and keeps every plaintext code."""

    def __init__(self):
        self.sent = []

    async def send(self, channel: OTPType, identifier: str, code: str) -> None:
        self.sent.append((channel, identifier, code))

    def last_code(self, identifier: str) -> str:
        codes = [code for _, ident, code in self.sent if ident == identifier]
        assert codes, f"no code was sent to {identifier}"
        return codes[-1]


# --- database fixtures ---
@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test, shared by every connection."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture(scope="function")
def client(session_factory, sender) -> Generator[TestClient, None, None]:
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_code_sender] = lambda: sender
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# --- user fixtures ---
@pytest.fixture(scope="function")
def make_user(db_session):
    """Factory that stores a user and returns it."""

    def _make_user(password: str | None = "secret-pass", **fields) -> User:
        fields.setdefault("role", Role.CUSTOMER)
        user = User(password_hash=get_password_hash(password) if password else None, **fields)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def otp_records(db_session):
    """Return all OTP records for an identifier, oldest first, read fresh from the database."""

    def _otp_records(identifier: str):
        db_session.expire_all()
        return (
            db_session.query(OTPRecord)
            .filter(OTPRecord.identifier == identifier)
            .order_by(OTPRecord.created_at, OTPRecord.id)
            .all()
        )

    return _otp_records
