"""
pytest configuration.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

src_dir = Path(__file__).parent.parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from core.config import ApiConfig, AppSettings, CredentialsConfig  # noqa: E402

SERVER_URL = "https://api.example.com/"
AUTH_URL = "https://auth.example.com/connect/token"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep developer env vars and .env files out of the tests."""
    for key in list(os.environ):
        if key.startswith("PRIMA_CLIENT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def credentials():
    return CredentialsConfig(
        client_id="client-1",
        client_secret="secret-1",
        username="alice",
        password="pa55",
        scope="api_read_all",
    )


@pytest.fixture
def api_config(credentials):
    return ApiConfig(
        server_url=SERVER_URL,
        authentication_url=AUTH_URL,
        credentials=credentials,
    )


@pytest.fixture
def settings():
    return AppSettings(_env_file=None)
