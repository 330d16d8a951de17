"""Pytest configuration and shared fixtures for the archive upload tool."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

CONFIG_ENV_VARS = (
    "LOCAL_ROOT",
    "BUCKET_PEOPLE",
    "BUCKET_PERFORMANCE",
    "BUCKET_PRODUCT",
    "REMOTE_PREFIX",
    "MAX_MB",
    "UPSERT",
    "DRY_RUN",
    "STORAGE_ENDPOINT_URL",
    "STORAGE_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "LOG_DIR",
    "UPLOAD_WORKERS",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Auto-use fixture that clears upload settings and points .env loading at an empty file.

    Keeps a developer's real .env or shell exports from leaking into tests.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / "empty.env"
    env_file.write_text("")
    monkeypatch.setenv("UPLOAD_ENV_FILE", str(env_file))
    yield str(env_file)


@pytest.fixture(name="mock_print")
def fixture_mock_print(monkeypatch):
    """Patch builtins.print and return the mock for assertions."""
    patched = mock.Mock()
    monkeypatch.setattr("builtins.print", patched)
    return patched
