# backend/tests/unit/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from linkoja.main import app
from linkoja.db import Base, get_db
from linkoja import models
from linkoja.auth import create_token_for_user, get_password_hash
from linkoja.core.errors import UnauthorizedError
from linkoja.core.settings import get_settings
from linkoja.dependencies import get_email_service, get_sms_service, get_google_oauth_service
from linkoja.enums import BusinessStatus, UserRole
from linkoja.services.google_oauth_service import GoogleUserInfo

# One in-memory DB shared across threads (TestClient) via StaticPool
engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enforce FKs in SQLite (off by default otherwise)
# pysqlite's own transaction handling breaks SAVEPOINT; SQLAlchemy emits BEGIN instead
@event.listens_for(engine, "connect")
def _set_sqlite_pragma(dbapi_connection, _):
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

@event.listens_for(engine, "begin")
def _do_begin(conn):
    conn.exec_driver_sql("BEGIN")

# Session commit/rollback only touch a savepoint; the test's outer transaction is rolled back at teardown
TestingSessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, join_transaction_mode="create_savepoint"
)
Base.metadata.create_all(bind=engine)


class FakeEmailService:
    """Records every email instead of talking to SMTP."""

    def __init__(self):
        self.sent = []

    def send_email(self, to_email, subject, html_body):
        self.sent.append(("raw", to_email, subject))
        return True

    def send_welcome_email(self, to_email, user_name):
        self.sent.append(("welcome", to_email, user_name))
        return True

    def send_password_reset_email(self, to_email, reset_token):
        self.sent.append(("reset", to_email, reset_token))
        return True

    def send_otp_email(self, to_email, otp_code):
        self.sent.append(("otp", to_email, otp_code))
        return True

    def send_business_decision_email(self, to_email, business_name, status, reason=None):
        self.sent.append(("decision", to_email, business_name, status, reason))
        return True

    def of_kind(self, kind):
        return [entry for entry in self.sent if entry[0] == kind]


class FakeSmsService:
    def __init__(self):
        self.sent = []

    def send_sms(self, phone_number, message):
        self.sent.append((phone_number, message))
        return True


class FakeGoogleOAuthService:
    """Accepts tokens registered in `identities`; anything else is rejected like Google would."""

    def __init__(self):
        self.identities = {}

    def validate_token(self, id_token):
        if id_token not in self.identities:
            raise UnauthorizedError("Invalid Google token")
        return self.identities[id_token]

    def register(self, token, google_id, email, name=""):
        self.identities[token] = GoogleUserInfo(google_id=google_id, email=email, name=name, email_verified=True)


@pytest.fixture
def connection():
    conn = engine.connect()
    tx = conn.begin()
    try:
        yield conn
    finally:
        tx.rollback()
        conn.close()

@pytest.fixture
def db_session(connection):
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def settings():
    return get_settings()

@pytest.fixture
def email_service():
    return FakeEmailService()

@pytest.fixture
def sms_service():
    return FakeSmsService()

@pytest.fixture
def google_service():
    return FakeGoogleOAuthService()

@pytest.fixture(autouse=True)
def _override_dependencies(db_session, email_service, sms_service, google_service):
    def _get_db():
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_sms_service] = lambda: sms_service
    app.dependency_overrides[get_google_oauth_service] = lambda: google_service
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    """Factory for persisted users: make_user("a@x.com", role=UserRole.ADMIN)"""
    def _make_user(email, password="password123", name=None, role=UserRole.USER, phone=None):
        user = models.User(
            email=email,
            password_hash=get_password_hash(password),
            name=name,
            role=role,
            phone=phone,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user

@pytest.fixture
def make_business(db_session):
    def _make_business(owner, name="Joe's Cafe", status=BusinessStatus.PENDING, **fields):
        business = models.Business(owner_id=owner.id, name=name, status=status, **fields)
        db_session.add(business)
        db_session.commit()
        db_session.refresh(business)
        return business
    return _make_business

@pytest.fixture
def owner(make_user):
    return make_user("owner@example.com", name="Olu Owner", role=UserRole.BUSINESS_OWNER)

@pytest.fixture
def customer(make_user):
    return make_user("customer@example.com", name="Cee Customer")

@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", name="Ada Admin", role=UserRole.ADMIN)

@pytest.fixture
def headers_for():
    def _headers_for(user):
        return {"Authorization": f"Bearer {create_token_for_user(user)}"}
    return _headers_for
