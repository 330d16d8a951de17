"""Shared pytest fixtures for test files."""

from __future__ import annotations

from pathlib import Path

import pytest

from archive_upload.config import UploadConfig
from archive_upload.routing import Classifier
from tests.storage_test_utils import FakeStorage


def write_file(root: Path, relative_path: str, size: int = 16) -> Path:
    """Create a file of *size* bytes under *root*, making parent directories."""
    path = root.joinpath(*relative_path.split("/"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture(name="upload_root")
def fixture_upload_root(tmp_path):
    """Empty directory used as LOCAL_ROOT."""
    root = tmp_path / "archive"
    root.mkdir()
    return root


@pytest.fixture(name="make_config")
def fixture_make_config(upload_root, tmp_path):
    """Factory for UploadConfig bound to the temporary root and log directory."""

    def _make(**overrides) -> UploadConfig:
        settings = {
            "local_root": upload_root,
            "log_dir": tmp_path / "logs",
            "access_key_id": "test_key",
            "secret_access_key": "test_secret",
        }
        settings.update(overrides)
        return UploadConfig(**settings)

    return _make


@pytest.fixture(name="fake_storage")
def fixture_fake_storage():
    """In-memory storage client recording every upload."""
    return FakeStorage()


@pytest.fixture(name="classifier")
def fixture_classifier():
    return Classifier()
