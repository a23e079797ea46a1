# tests/conftest.py

from __future__ import annotations

import os

# `main` builds a module-level app from the environment on import.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CONFIGURE_LOGGING", "0")
os.environ.setdefault("ARTIFACT_BACKEND", "memory")

from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from config import Settings
from core.artifacts import MemoryArtifactSink
from core.context import ServiceContext, build_context
from main import create_app

from .fakes import FixedClock, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'app.db'}",
        jwt_secret_key="test-secret",
        artifact_backend="memory",
        uploads_dir=tmp_path / "uploads",
        upload_attempts=3,
        upload_backoff_seconds=0,
        mail_backend="log",
        configure_logging=False,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 1, 9, 0))


@pytest.fixture()
def ctx(settings: Settings, notifier: RecordingNotifier, clock: FixedClock) -> ServiceContext:
    """
    Real SQLite store, in-memory artifacts, recorded mail, frozen clock.
    """
    context = build_context(settings, sink=MemoryArtifactSink(), notifier=notifier)
    context.clock = clock
    context.database.init_db()
    yield context
    context.database.dispose()


@pytest.fixture()
def db(ctx: ServiceContext):
    session = ctx.database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(ctx: ServiceContext):
    app = create_app(ctx=ctx)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client: TestClient):
    """Registers a user and returns auth headers for them."""

    def _register(username: str, password: str = "s3cret-pw", email: str | None = None) -> dict:
        data = {"username": username, "password": password}
        if email:
            data["email"] = email
        res = client.post("/register", data=data)
        assert res.status_code == 201, res.text
        res = client.post("/login", json={"username": username, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _register


@pytest.fixture()
def fail_sql(ctx: ServiceContext):
    """
    Makes every statement starting with a given prefix fail like a dropped
    connection would. Returns a callable that arms it; cleanup is automatic.
    """
    armed: list = []

    def _arm(prefix: str) -> None:
        def _fail(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith(prefix.upper()):
                raise OperationalError(statement, parameters, Exception("database is gone"))

        event.listen(ctx.database.engine, "before_cursor_execute", _fail)
        armed.append(_fail)

    yield _arm

    for fn in armed:
        event.remove(ctx.database.engine, "before_cursor_execute", fn)
