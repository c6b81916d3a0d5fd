from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the todo_api package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from todo_api.core import config as core_config  # noqa: E402
from todo_api.db import models  # noqa: E402
from todo_api.db import session as db_session  # noqa: E402
from todo_api.db.create_tables import init_db  # noqa: E402
import todo_api.services.account_service as account_service  # noqa: E402

STRONG_PASSWORD = "Passw0rd!"


def _reset_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Temporary SQLite database with the schema created and roles seeded."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("TOKEN_KEY", "test-signing-key-0123456789abcdef0123456789")
    monkeypatch.setenv("LOCKOUT_MAX_FAILED_ATTEMPTS", "3")
    _reset_caches()

    init_db()
    engine = db_session.get_engine()

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _reset_caches()


@pytest.fixture()
def sent_emails(monkeypatch):
    """Capture outgoing emails as (subject, to, text) tuples."""
    outbox: list[tuple[str, str, str]] = []

    def _fake_send(subject, to_email, html_body, text_body=None):
        outbox.append((subject, to_email, text_body or html_body))
        return True

    monkeypatch.setattr(account_service, "send_email", _fake_send)
    return outbox


@pytest.fixture()
def client(db_env, sent_emails):
    from todo_api.app import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def code_from(outbox, subject: str) -> str:
    """Return the one-time code from the latest email with the given subject."""
    for subj, _to, text in reversed(outbox):
        if subj == subject:
            return text.rsplit(": ", 1)[1]
    raise AssertionError(f"no email with subject {subject!r}")


def register(client, email: str, password: str = STRONG_PASSWORD, role: str | None = None):
    payload = {"email": email, "password": password}
    if role is not None:
        payload["role"] = role
    return client.post("/api/AccountAPI/Register", json=payload)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
