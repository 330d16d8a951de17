"""
Configuration for the archive upload tool.

Settings come from the process environment, optionally seeded from a ``.env``
file, and are frozen into an ``UploadConfig`` that every component receives
explicitly.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .routing import BucketId
from .utils import BYTES_PER_KIB, BYTES_PER_MIB

DEFAULT_MAX_MB = 50
SAFETY_MARGIN_BYTES = 256 * BYTES_PER_KIB
DEFAULT_REMOTE_PREFIX = "upload"
DEFAULT_LOG_DIR = "logs"

DEFAULT_BUCKETS = {
    BucketId.PEOPLE: "archive-people",
    BucketId.PERFORMANCE: "archive-performance",
    BucketId.PRODUCT: "archive-product",
}

BUCKET_ENV_VARS = {
    BucketId.PEOPLE: "BUCKET_PEOPLE",
    BucketId.PERFORMANCE: "BUCKET_PERFORMANCE",
    BucketId.PRODUCT: "BUCKET_PRODUCT",
}


class ConfigError(RuntimeError):
    """Raised when required configuration is missing."""


def get_env(name: str, fallback: Optional[str] = None) -> Optional[str]:
    """Return an environment variable, treating empty strings as unset."""
    value = os.environ.get(name)
    if value is None or value == "":
        return fallback
    return value


def to_bool(value: Optional[str], fallback: bool = False) -> bool:
    """Only the string ``true`` (any case) counts as true."""
    if value is None:
        return fallback
    return str(value).strip().lower() == "true"


def to_int(value: Optional[str], fallback: int) -> int:
    """Parse an integer setting, falling back on anything non-numeric."""
    if value is None:
        return fallback
    try:
        return int(str(value).strip())
    except ValueError:
        logging.warning("Ignoring non-integer setting %r; using %s", value, fallback)
        return fallback


def to_number(value: Optional[str], fallback: float) -> float:
    """Parse a positive numeric setting; whole numbers come back as int."""
    if value is None:
        return fallback
    try:
        number = float(str(value).strip())
    except ValueError:
        number = math.nan
    if not math.isfinite(number) or number <= 0:
        logging.warning("Ignoring invalid numeric setting %r; using %s", value, fallback)
        return fallback
    return int(number) if number.is_integer() else number


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be loaded.

    Priority order:
      1. Explicit parameter
      2. UPLOAD_ENV_FILE environment variable
      3. ./.env
    """
    if env_path:
        return env_path
    env_file = os.environ.get("UPLOAD_ENV_FILE")
    if env_file:
        return env_file
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class UploadConfig:  # pylint: disable=too-many-instance-attributes
    """Immutable settings shared by the walker, classifier, transfer engine and resume."""

    local_root: Path
    buckets: dict = field(default_factory=lambda: dict(DEFAULT_BUCKETS))
    remote_prefix: str = DEFAULT_REMOTE_PREFIX
    max_mb: float = DEFAULT_MAX_MB
    upsert: bool = False
    dry_run: bool = False
    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    workers: int = 1

    @property
    def max_bytes(self) -> int:
        """Nominal per-file limit in bytes."""
        return int(self.max_mb * BYTES_PER_MIB)

    @property
    def skip_over_bytes(self) -> int:
        """Largest admitted size; the margin covers upload envelope overhead."""
        return self.max_bytes - SAFETY_MARGIN_BYTES

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)

    def bucket_name(self, bucket: BucketId) -> str:
        """Backend bucket name configured for a logical bucket."""
        return self.buckets[bucket]

    def validate(self) -> "UploadConfig":
        """Raise ConfigError unless the settings are usable for a run."""
        if not self.dry_run and not self.has_credentials:
            raise ConfigError(
                "Missing AWS_ACCESS_KEY_ID or AWS_SECRET_ACCESS_KEY (or set DRY_RUN=true)"
            )
        return self


def load_config(env_path: Optional[str] = None, overrides: Optional[dict] = None) -> UploadConfig:
    """
    Build an UploadConfig from the environment.

    Args:
        env_path: Optional .env file to load before reading variables
        overrides: Field values (e.g. from CLI flags) applied before validation

    Returns:
        Validated UploadConfig

    Raises:
        ConfigError: If LOCAL_ROOT is missing, or credentials are missing
            while not dry-running
    """
    load_dotenv(_resolve_env_path(env_path))

    local_root = get_env("LOCAL_ROOT")
    overrides = {key: value for key, value in (overrides or {}).items() if value is not None}
    if not local_root and "local_root" not in overrides:
        raise ConfigError("Missing LOCAL_ROOT (set it in .env or pass --root)")

    buckets = {
        bucket: get_env(env_var, DEFAULT_BUCKETS[bucket])
        for bucket, env_var in BUCKET_ENV_VARS.items()
    }
    config = UploadConfig(
        local_root=Path(local_root or "."),
        buckets=buckets,
        remote_prefix=get_env("REMOTE_PREFIX", DEFAULT_REMOTE_PREFIX),
        max_mb=to_number(get_env("MAX_MB"), DEFAULT_MAX_MB),
        upsert=to_bool(get_env("UPSERT"), False),
        dry_run=to_bool(get_env("DRY_RUN"), False),
        endpoint_url=get_env("STORAGE_ENDPOINT_URL"),
        region=get_env("STORAGE_REGION"),
        access_key_id=get_env("AWS_ACCESS_KEY_ID"),
        secret_access_key=get_env("AWS_SECRET_ACCESS_KEY"),
        log_dir=Path(get_env("LOG_DIR", DEFAULT_LOG_DIR)),
        workers=max(1, to_int(get_env("UPLOAD_WORKERS"), 1)),
    )
    if "local_root" in overrides:
        overrides["local_root"] = Path(overrides["local_root"])
    if overrides:
        config = replace(config, **overrides)
    return config.validate()
