"""Pytest fixtures for API testing."""

import os
import tempfile

import pytest

# The app module builds a default app at import time; keep it out of $HOME.
os.environ.setdefault("FREEDOMWALL_DATA_DIR", tempfile.mkdtemp(prefix="freedomwall-test-"))

from fastapi.testclient import TestClient  # noqa: E402

from freedomwall.config import Settings  # noqa: E402
from web.backend.app.main import create_app  # noqa: E402

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path, admin_key=ADMIN_KEY, session_secret="test-session-secret")


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"admin-key": ADMIN_KEY}


@pytest.fixture
def make_post(client):
    """Create a post and return its JSON."""

    def _make(message: str = "hello wall", name: str | None = None) -> dict:
        body = {"message": message}
        if name is not None:
            body["name"] = name
        r = client.post("/api/v1/posts", json=body)
        assert r.status_code == 201, r.text
        return r.json()

    return _make
