from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="wellnest-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("JWT_SECRET", "test-suite-secret-with-enough-entropy-0123")
os.environ.setdefault("RESILIENCE_BACKOFF_BASE", "0")
os.environ.setdefault("RESILIENCE_BACKOFF_CAP", "0")
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402

from wellnest.infrastructure.db import init_db, session_scope  # noqa: E402
from wellnest.infrastructure.db.models import AuditLog, OtpCode, User  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema() -> None:
    init_db()


@pytest.fixture()
def clean_db() -> None:
    with session_scope() as session:
        session.query(AuditLog).delete()
        session.query(OtpCode).delete()
        session.query(User).delete()
