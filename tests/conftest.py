import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["EMAIL_BACKEND"] = "console"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.testclient import TestClient

from app import models  # noqa: F401  registers tables on Base.metadata
from app.database import Base, get_db
from app.dependencies import get_flow_registry, get_otp_sender
from app.main import app
from app.models.app_user import AppUser, UserStatus
from app.services.flow_registry import FlowRegistry

# One shared in-memory database for the whole session; tables are rebuilt per test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class RecordingSender:
    """Stands in for the email collaborator and remembers what it was asked to send."""

    def __init__(self):
        self.sent = []
        self.error = None

    def __call__(self, to_email, otp_code):
        if self.error is not None:
            raise self.error
        self.sent.append((to_email, otp_code))

    @property
    def last_otp(self):
        return self.sent[-1][1]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": "test-admin-key"}


@pytest.fixture
def registry():
    return FlowRegistry(idle_minutes=30)


@pytest.fixture
def make_user(db):
    def _make_user(email="a@x.com", status=UserStatus.APPROVED, password="OldPass1!", full_name="Alice Example"):
        user = AppUser(full_name=full_name, email=email, password=password, status=status)
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def client(db, sender, registry):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_sender] = lambda: sender
    app.dependency_overrides[get_flow_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
