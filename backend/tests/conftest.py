"""
Pytest configuration and shared fixtures for all tests.
"""
import os

# Module-level settings/engine are built at import time; keep them off PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth_api.core.config import Settings
from auth_api.core.deps import get_db, get_notifier
from auth_api.core.security import TokenIssuer
from auth_api.main import create_app
from auth_api.models import Base
from auth_api.services.auth_service import AuthService
from tests.helpers import FrozenClock, RecordingNotifier


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_ACCESS_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        PASSWORD_HASH_ROUNDS=4,
        EXPOSE_OTP_IN_RESPONSE=False,
        BLOCK_ENDPOINTS_REQUIRE_ADMIN=True,
        SMTP_HOST="",
        SMTP_USER="",
        TWILIO_ACCOUNT_SID="",
        TWILIO_AUTH_TOKEN="",
        TWILIO_PHONE_NUMBER="",
        PAYMENT_WEBHOOK_SECRET="whsec_test",
        PAYMENT_WEBHOOK_FORWARD_URL="",
        ADMIN_SEED_EMAIL="",
        ADMIN_SEED_PASSWORD="",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def tokens(settings):
    return TokenIssuer.from_settings(settings)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def service(db, settings, tokens, notifier, clock):
    return AuthService(db, settings, tokens, notifier, clock=clock)


@pytest.fixture
def app(settings, db, notifier):
    application = create_app(settings)

    def override_get_db():
        yield db

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_notifier] = lambda: notifier
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
