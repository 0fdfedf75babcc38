"""Shared fixtures: isolated config, database and API client."""

import pytest
from fastapi.testclient import TestClient

from codetrain.config.app_config import AppConfig, clear_config_cache
from codetrain.web.api import create_app

COOKIE_NAME = "codetrain.sid"


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep tests away from real config files and CODETRAIN_* variables."""
    for var in (
        "CODETRAIN_ENV",
        "CODETRAIN_CONFIG",
        "CODETRAIN_DATABASE_PATH",
        "CODETRAIN_SESSION_STORE",
        "CODETRAIN_SESSION_SECRET",
        "CODETRAIN_ALLOWED_ORIGINS",
        "CODETRAIN_PUBLIC_URL",
        "CODETRAIN_REDIS_URL",
        "CODETRAIN_COOKIE_DOMAIN",
        "PORT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def config(tmp_path) -> AppConfig:
    """Development config with a throwaway database."""
    return AppConfig(
        database_path=tmp_path / "db" / "students.db",
        session_secret="test-secret",
        allowed_origins=["http://localhost:3000"],
    )


@pytest.fixture
def app(config):
    return create_app(config)


@pytest.fixture
def client(app):
    """Test client with lifespan (database, catalog, sessions) running."""
    with TestClient(app) as test_client:
        yield test_client


def register(client, username="alice", email="a@example.com", password="secret1"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


@pytest.fixture
def logged_in_client(client):
    """Client holding a session for user 'alice'."""
    response = register(client)
    assert response.status_code == 200
    return client
