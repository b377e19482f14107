"""Shared fixtures for the staffdesk test suite."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import api.database as _db_module
from api.store import EmployeeStore


# ── Notifier double ──────────────────────────────────────────────────

class RecordingNotifier:
    """Stands in for EmailNotifier: records every send, never touches SMTP."""

    def __init__(self, ready: bool = True, admin_email: str | None = "admin@acme.io"):
        self.is_ready = ready
        self.admin_email = admin_email
        self.sent: list[tuple] = []
        self.verified = False

    def verify(self) -> bool:
        self.verified = True
        return self.is_ready

    def send_welcome(self, email, name):
        self.sent.append(("welcome", email, name))
        return True

    def send_import_summary(self, admin_email, summary):
        self.sent.append(("import_summary", admin_email, dict(summary)))
        return True

    def send_daily_report(self, admin_email, stats, today=None):
        self.sent.append(("daily_report", admin_email, dict(stats)))
        return True

    def send_birthday_reminder(self, admin_email, employees):
        self.sent.append(("birthday", admin_email, list(employees)))
        return True

    def send_generic(self, to, subject, body, *, html=None):
        self.sent.append(("generic", to, subject))
        return True

    def kinds(self) -> list[str]:
        return [s[0] for s in self.sent]


# ── Database ─────────────────────────────────────────────────────────

@pytest.fixture
def tmp_db(tmp_path, monkeypatch) -> Path:
    """Fresh SQLite file; every EmployeeStore() without a path uses it."""
    db_path = tmp_path / "staffdesk_test.db"
    monkeypatch.setattr(_db_module, "_DB_PATH", db_path)
    _db_module.init_db(db_path)
    return db_path


@pytest.fixture
def store(tmp_db) -> EmployeeStore:
    return EmployeeStore(tmp_db)


# ── API ──────────────────────────────────────────────────────────────

@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def client(tmp_db, notifier):
    from fastapi.testclient import TestClient

    from api.dependencies import get_notifier
    from api.main import app

    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ── Sample rows ──────────────────────────────────────────────────────

@pytest.fixture
def valid_row() -> dict:
    return {
        "name": "Ann Lee",
        "email": "ann.lee@acme.io",
        "phoneNumber": "081234567890",
        "address": "1 Harbour Rd",
        "dateOfBirth": "1991-04-09",
        "position": "Accountant",
    }
