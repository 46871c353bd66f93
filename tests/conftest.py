"""Pytest fixtures: isolated data directory, low bcrypt cost, live TestClient."""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.core.catalog import ProductCatalog
from src.core.config import Settings
from src.core.credentials import CredentialVault
from src.core.tokens import TokenService

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256-keys"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_dir      = tmp_path / "data",
        jwt_secret    = TEST_SECRET,
        bcrypt_rounds = 4,
        static_dir    = tmp_path / "public",
    )


@pytest.fixture
def catalog(settings):
    c = ProductCatalog(settings)
    c.store.ensure()
    return c


@pytest.fixture
def vault(settings):
    v = CredentialVault(settings)
    v.store.ensure()
    return v


@pytest.fixture
def tokens(settings):
    return TokenService(settings)


@pytest.fixture
def client(settings):
    """TestClient used as a context manager so the lifespan seeds the data files."""
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}
