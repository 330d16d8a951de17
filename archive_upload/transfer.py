"""
Per-file transfer: size admission, routing, remote path and upload.

Every call returns exactly one ``Outcome``; per-file errors are converted into
FAIL or SKIP outcomes and never escape to the caller.
"""

from __future__ import annotations

import hashlib
import logging
import mimetypes
from typing import Optional

from .config import UploadConfig
from .models import FileRecord, Outcome, OutcomeKind
from .routing import BucketId, Classifier, Skip
from .storage import StorageClient, StorageConflict, StorageError
from .utils import BYTES_PER_MIB

DEFAULT_CONTENT_TYPE = "application/octet-stream"
OVER_SIZE_PREFIX = "SKIP_over_"
ROUTING_SKIP_PREFIX = "SKIP_"


class SizeLimitExceeded(ValueError):
    """Raised when a file is larger than the admitted upload size."""

    def __init__(self, size: int, limit: int, max_mb: float):
        super().__init__(f"{size} bytes exceeds {limit} bytes")
        self.size = size
        self.limit = limit
        self.max_mb = max_mb


def stable_id_for_string(value: str) -> str:
    """Short, stable hex id for a string (first 10 hex chars of its SHA-1)."""
    return hashlib.sha1(str(value).encode("utf-8")).hexdigest()[:10]


def make_remote_path(config: UploadConfig, bucket: BucketId, relative_path: str) -> str:
    """
    Build the object key for a file.

    The key is ``<prefix>-<bucket short name>-<root id>/<relative path>`` with
    forward slashes; the root id keeps uploads from different roots apart.
    """
    root_tag = f"{config.remote_prefix}-{bucket.value}-{stable_id_for_string(str(config.local_root))}"
    parts = [part for part in relative_path.replace("\\", "/").split("/") if part not in ("", ".")]
    return "/".join([root_tag, *parts])


def content_type_for(record: FileRecord) -> str:
    content_type, _encoding = mimetypes.guess_type(record.name)
    return content_type or DEFAULT_CONTENT_TYPE


def check_size(size: int, config: UploadConfig) -> None:
    """Raise SizeLimitExceeded when *size* is over the admitted limit."""
    if size > config.skip_over_bytes:
        raise SizeLimitExceeded(size, config.skip_over_bytes, config.max_mb)


def over_size_message(exc: SizeLimitExceeded) -> str:
    return f"{OVER_SIZE_PREFIX}{exc.max_mb}MB ({exc.size / BYTES_PER_MIB:.1f}MB)"


def log_outcome(outcome: Outcome) -> None:
    """Log one outcome at a level matching its severity."""
    rel = outcome.record.relative_path
    kind = outcome.kind
    if kind is OutcomeKind.FAILED:
        logging.error("FAIL: [%s] %s -> %s", outcome.bucket, rel, outcome.message)
    elif kind is OutcomeKind.SKIPPED:
        logging.warning("%s: %s", outcome.message, rel)
    elif kind is OutcomeKind.DRY_RUN:
        logging.info("DRY_RUN: [%s] %s -> %s", outcome.bucket, rel, outcome.remote_path)
    else:
        logging.info("%s: [%s] %s", kind.value, outcome.bucket, rel)


class TransferEngine:
    """Decides and performs the upload of one file at a time."""

    def __init__(
        self,
        config: UploadConfig,
        classifier: Classifier,
        storage: Optional[StorageClient],
    ):
        if storage is None and not config.dry_run:
            raise ValueError("A storage client is required unless dry-running")
        self.config = config
        self.classifier = classifier
        self.storage = storage

    def transfer(self, record: FileRecord) -> Outcome:
        """Run size admission, routing and upload for a walked file."""
        try:
            size = record.path.stat().st_size
        except OSError as exc:
            return Outcome(OutcomeKind.FAILED, record, message=f"Cannot stat file: {exc}")
        record = record.with_size(size)

        try:
            check_size(size, self.config)
        except SizeLimitExceeded as exc:
            return Outcome(OutcomeKind.SKIPPED, record, message=over_size_message(exc))

        decision = self.classifier.classify(record)
        if isinstance(decision, Skip):
            return Outcome(
                OutcomeKind.SKIPPED, record, message=f"{ROUTING_SKIP_PREFIX}{decision.reason}"
            )

        bucket_name = self.config.bucket_name(decision.bucket)
        remote_path = make_remote_path(self.config, decision.bucket, record.relative_path)
        return self.upload_routed(record, bucket_name, remote_path)

    def upload_routed(self, record: FileRecord, bucket_name: str, remote_path: str) -> Outcome:
        """Upload a sized, already-routed file; dry runs stop before any I/O."""
        if self.config.dry_run:
            return Outcome(OutcomeKind.DRY_RUN, record, bucket_name, remote_path)

        try:
            data = record.path.read_bytes()
        except OSError as exc:
            return Outcome(
                OutcomeKind.FAILED, record, bucket_name, remote_path, f"Cannot read file: {exc}"
            )

        try:
            self.storage.upload(
                bucket_name,
                remote_path,
                data,
                content_type=content_type_for(record),
                upsert=self.config.upsert,
            )
        except StorageConflict as exc:
            return Outcome(
                OutcomeKind.ALREADY_EXISTS, record, bucket_name, remote_path, str(exc)
            )
        except StorageError as exc:
            message = str(exc) or "Unknown error"
            return Outcome(OutcomeKind.FAILED, record, bucket_name, remote_path, message)
        return Outcome(OutcomeKind.OK, record, bucket_name, remote_path)
