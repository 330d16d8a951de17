"""Tests for archive_upload/config.py"""

from pathlib import Path

import pytest

from archive_upload.config import (
    SAFETY_MARGIN_BYTES,
    ConfigError,
    UploadConfig,
    load_config,
    to_bool,
    to_int,
    to_number,
)
from archive_upload.routing import BucketId
from tests.assertions import assert_equal


class TestParsers:
    """Environment value parsing"""

    @pytest.mark.parametrize("value,expected", [("true", True), ("TRUE", True), ("yes", False), ("1", False)])
    def test_to_bool_only_accepts_true(self, value, expected):
        """Only the string 'true' enables a flag"""
        assert to_bool(value) is expected

    def test_to_bool_fallback_for_none(self):
        """None falls back to the default"""
        assert to_bool(None, True) is True

    def test_to_int_falls_back_on_garbage(self):
        """Non-numeric values use the fallback"""
        assert_equal(to_int("abc", 50), 50)
        assert_equal(to_int(" 12 ", 50), 12)

    @pytest.mark.parametrize(
        "value,expected",
        [("49.5", 49.5), ("10", 10), ("2.0", 2), ("abc", 50), ("0", 50), ("-3", 50), ("inf", 50)],
    )
    def test_to_number_accepts_fractions(self, value, expected):
        """Fractional sizes are kept; non-positive or non-numeric values fall back"""
        assert_equal(to_number(value, 50), expected)

    def test_invalid_number_logs_warning(self, caplog):
        with caplog.at_level("WARNING"):
            to_number("lots", 50)
        assert "lots" in caplog.text


class TestLoadConfig:
    """load_config from environment and .env files"""

    def test_missing_local_root_raises(self):
        """LOCAL_ROOT is required"""
        with pytest.raises(ConfigError, match="LOCAL_ROOT"):
            load_config()

    def test_missing_credentials_raises_without_dry_run(self, monkeypatch, tmp_path):
        """Credentials are required for a real run"""
        monkeypatch.setenv("LOCAL_ROOT", str(tmp_path))
        with pytest.raises(ConfigError, match="AWS_ACCESS_KEY_ID"):
            load_config()

    def test_dry_run_does_not_need_credentials(self, monkeypatch, tmp_path):
        """DRY_RUN=true accepts missing credentials"""
        monkeypatch.setenv("LOCAL_ROOT", str(tmp_path))
        monkeypatch.setenv("DRY_RUN", "true")
        config = load_config()
        assert config.dry_run is True
        assert config.has_credentials is False

    def test_defaults(self, monkeypatch, tmp_path):
        """Unset variables take their documented defaults"""
        monkeypatch.setenv("LOCAL_ROOT", str(tmp_path))
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "key")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
        config = load_config()
        assert_equal(config.local_root, tmp_path)
        assert_equal(config.remote_prefix, "upload")
        assert_equal(config.max_mb, 50)
        assert config.upsert is False
        assert_equal(config.bucket_name(BucketId.PEOPLE), "archive-people")
        assert_equal(config.bucket_name(BucketId.PERFORMANCE), "archive-performance")
        assert_equal(config.bucket_name(BucketId.PRODUCT), "archive-product")
        assert_equal(config.log_dir, Path("logs"))
        assert_equal(config.workers, 1)

    def test_values_loaded_from_env_file(self, tmp_path):
        """An explicit .env file supplies settings"""
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            f"LOCAL_ROOT={tmp_path}\n"
            "DRY_RUN=true\n"
            "MAX_MB=10\n"
            "UPSERT=true\n"
            "BUCKET_PRODUCT=prod-bucket\n"
            "REMOTE_PREFIX=nas\n"
        )
        config = load_config(str(env_file))
        assert_equal(config.max_mb, 10)
        assert config.upsert is True
        assert_equal(config.bucket_name(BucketId.PRODUCT), "prod-bucket")
        assert_equal(config.remote_prefix, "nas")

    def test_empty_string_treated_as_unset(self, monkeypatch, tmp_path):
        """Empty values fall back to defaults"""
        monkeypatch.setenv("LOCAL_ROOT", str(tmp_path))
        monkeypatch.setenv("DRY_RUN", "true")
        monkeypatch.setenv("BUCKET_PEOPLE", "")
        config = load_config()
        assert_equal(config.bucket_name(BucketId.PEOPLE), "archive-people")

    def test_overrides_apply_before_validation(self, tmp_path):
        """A CLI dry-run override lifts the credential requirement"""
        config = load_config(overrides={"local_root": str(tmp_path), "dry_run": True})
        assert_equal(config.local_root, tmp_path)
        assert config.dry_run is True

    def test_none_overrides_are_ignored(self, monkeypatch, tmp_path):
        """Unset CLI flags do not clobber environment settings"""
        monkeypatch.setenv("LOCAL_ROOT", str(tmp_path))
        monkeypatch.setenv("DRY_RUN", "true")
        config = load_config(overrides={"dry_run": None, "workers": None})
        assert config.dry_run is True


class TestUploadConfig:
    """Derived limits"""

    def test_size_limits(self, tmp_path):
        """skip_over_bytes is max_bytes minus the safety margin"""
        config = UploadConfig(local_root=tmp_path, max_mb=50)
        assert_equal(config.max_bytes, 50 * 1024 * 1024)
        assert_equal(config.skip_over_bytes, 50 * 1024 * 1024 - SAFETY_MARGIN_BYTES)
        assert_equal(SAFETY_MARGIN_BYTES, 256 * 1024)

    def test_fractional_limit(self, monkeypatch, tmp_path):
        """MAX_MB=49.5 is honoured in bytes"""
        monkeypatch.setenv("LOCAL_ROOT", str(tmp_path))
        monkeypatch.setenv("DRY_RUN", "true")
        monkeypatch.setenv("MAX_MB", "49.5")
        config = load_config()
        assert_equal(config.max_mb, 49.5)
        assert_equal(config.max_bytes, 49 * 1024 * 1024 + 512 * 1024)

    def test_config_is_immutable(self, tmp_path):
        """Fields cannot be reassigned"""
        config = UploadConfig(local_root=tmp_path)
        with pytest.raises(AttributeError):
            config.dry_run = True  # type: ignore[misc]
