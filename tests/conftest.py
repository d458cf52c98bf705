"""
Shared pytest fixtures for users-api tests.

This module provides common fixtures used across all test files, including:
- Temporary users files (seeded, empty, malformed)
- Settings pointing at those files
- A FastAPI test client wired to a real JSON-file store
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from users_api.config import Settings


# ============================================================================
# Users File Fixtures
# ============================================================================

@pytest.fixture
def seed_users() -> List[Dict[str, Any]]:
    """Collection used by the scenario tests."""
    return [{"id": 1, "name": "A"}]


@pytest.fixture
def users_file(tmp_path: Path, seed_users) -> Path:
    """A users file holding the seed collection."""
    path = tmp_path / "users.json"
    path.write_text(json.dumps(seed_users), encoding="utf-8")
    return path


@pytest.fixture
def empty_users_file(tmp_path: Path) -> Path:
    """A users file holding an empty collection."""
    path = tmp_path / "users.json"
    path.write_text("[]", encoding="utf-8")
    return path


@pytest.fixture
def malformed_users_file(tmp_path: Path) -> Path:
    """A users file that is not valid JSON."""
    path = tmp_path / "users.json"
    path.write_text('[{"id": 1, "name": ', encoding="utf-8")
    return path


# ============================================================================
# Settings and Client Fixtures
# ============================================================================

@pytest.fixture
def make_settings():
    """Build Settings for a given users file without touching the environment."""
    def _make(path: Path, **overrides) -> Settings:
        values = {"users_file": str(path), "create_file": False}
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def make_client(make_settings):
    """Factory for a TestClient whose services point at a given users file."""
    from users_api.api.app import app
    from users_api.api.routes import services

    def _make(path: Path, **overrides) -> TestClient:
        services.initialize(make_settings(path, **overrides))
        return TestClient(app)

    yield _make
    services.cleanup()


@pytest.fixture
def client(make_client, users_file):
    """Test client backed by the seeded users file."""
    return make_client(users_file)


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove users-api variables and run from an empty directory (no .env)."""
    for name in (
        "HOST", "PORT",
        "USERS_API_HOST", "USERS_API_PORT", "USERS_API_USERS_FILE",
        "USERS_API_STATIC_DIR", "USERS_API_ID_STRATEGY",
        "USERS_API_WRITE_ERROR_STATUS", "USERS_API_CREATE_FILE",
        "USERS_API_LOG_LEVEL",
    ):
        # Registered with setenv first so values loaded from .env are undone too.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield
