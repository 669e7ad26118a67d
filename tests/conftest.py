"""Shared fixtures: in-memory database, auth tokens, API client."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from tradeboost.config import settings
from tradeboost.database import get_session, init_db

TEST_SECRET = "test-secret"

# 12:00 UTC on 15 March 2026 (Europe/London is on GMT until the 29th)
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def make_token(user_id: str, secret: str = TEST_SECRET) -> str:
    return jwt.encode({"sub": user_id}, secret, algorithm="HS256")


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def client(session, monkeypatch):
    from tradeboost.main import app

    monkeypatch.setattr(settings, "auth_jwt_secret", TEST_SECRET)
    monkeypatch.setattr(settings, "call_webhook_secret", None)
    app.dependency_overrides[get_session] = lambda: session
    # No context manager: skip the lifespan so the real database is never touched
    yield TestClient(app)
    app.dependency_overrides.clear()
