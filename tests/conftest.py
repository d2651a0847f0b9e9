"""Shared fixtures: temporary asset root, service objects, HTTP client.

Invariants:
    - Every test gets its own asset root under tmp_path
    - The module-level app in main.py never touches a real data directory
"""

import os
import tempfile
from contextlib import asynccontextmanager

# Must be set before config/main are imported: main builds a default app
os.environ.setdefault("ASSET_DATA_DIR", tempfile.mkdtemp(prefix="asset-store-test-"))
os.environ.setdefault("API_KEY", "env-admin-key")

import pytest
from httpx import ASGITransport, AsyncClient

from assets import AssetService, AssetStore
from config import Settings
from main import create_app
from support import ADMIN_KEY, USER_KEY


@pytest.fixture
def asset_root(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def store(asset_root):
    return AssetStore(asset_root)


@pytest.fixture
def service(store):
    return AssetService(store, max_file_size=1024)


@pytest.fixture
def make_settings(asset_root):
    """Settings bound to the test asset root; keyword args override."""
    def _make(**overrides):
        values = {
            "ASSET_ROOT": str(asset_root),
            "API_KEY": ADMIN_KEY,
            "USER_API_KEYS": [USER_KEY],
            "MAX_FILE_SIZE": 1024,
            "ENFORCE_MAX_FILE_SIZE": True,
            "ATOMIC_WRITES": True,
            "ALLOW_NON_ADMIN_UPLOADS": False,
        }
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def client_for():
    """Open an AsyncClient against an app built from the given settings."""
    @asynccontextmanager
    async def _client_for(settings):
        app = create_app(settings)
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as c:
            yield c
    return _client_for


@pytest.fixture
async def client(make_settings, client_for):
    async with client_for(make_settings()) as c:
        yield c
