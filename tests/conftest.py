"""Pytest fixtures: in-memory DB, fake push gateway, test client."""
import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Must be set before the app is imported
os.environ.setdefault("DB_URL", "sqlite://")
os.environ["ENABLE_SCHEDULER"] = "false"

from sabi_push.database import Base
from sabi_push.dependencies import get_db, get_gateway
from sabi_push.main import app
from sabi_push.models.device import Device
from sabi_push.models.pubkey_device import PubkeyDevice
from sabi_push.services.push_gateway import PushGateway
from sabi_push.services.token_directory import TokenDirectory


class FakeGateway(PushGateway):
    """Records sends; raises the error configured for a token, if any."""

    def __init__(self, errors=None, configured=True):
        super().__init__(app=None)
        self.errors = errors or {}
        self._configured = configured
        self.sent = []

    @property
    def configured(self):
        return self._configured

    def send(self, token, notification):
        self.sent.append((token, notification))
        error = self.errors.get(token)
        if error is not None:
            raise error
        return f"projects/test/messages/{len(self.sent)}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def directory(db):
    return TokenDirectory(db)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def add_device(db):
    """Insert a device owned by ``pubkey`` last seen ``days_ago`` days back (or exactly at ``seen``)."""
    def _add(pubkey, token, days_ago=0, seen=None):
        if seen is None:
            seen = datetime.now(timezone.utc) - timedelta(days=days_ago)
        db.add(Device(token=token, nostr_pubkey=pubkey, platform="android",
                      registered_at=seen, last_active=seen))
        db.add(PubkeyDevice(nostr_pubkey=pubkey, token=token))
        db.commit()
    return _add
