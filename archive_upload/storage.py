"""
Object storage client used by the transfer engine.

Wraps a boto3 S3 client (any S3-compatible endpoint) behind a single
``upload`` call that either returns or raises ``StorageError``. Conflicts with
an existing object are raised as ``StorageConflict`` so callers can treat them
as a terminal, non-error state.
"""

from __future__ import annotations

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import UploadConfig

ALREADY_EXISTS_MARKER = "already exists"
CONFLICT_ERROR_CODES = frozenset(
    {"PreconditionFailed", "Duplicate", "409", "ResourceAlreadyExists", "KeyAlreadyExists"}
)


class StorageError(RuntimeError):
    """Raised when the backend rejects or fails an upload."""

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.code = code


class StorageConflict(StorageError):
    """Raised when the object already exists and upsert is disabled."""


def is_conflict(code: str, message: str) -> bool:
    """True when a backend error means the object is already there."""
    return code in CONFLICT_ERROR_CODES or ALREADY_EXISTS_MARKER in message.lower()


def _client_error_details(exc: ClientError) -> tuple[str, str]:
    error = exc.response.get("Error", {})
    code = str(error.get("Code", ""))
    message = str(error.get("Message") or exc)
    return code, message


class StorageClient:  # pylint: disable=too-few-public-methods
    """Uploads whole objects to a bucket through a boto3 S3 client."""

    def __init__(self, s3):
        self.s3 = s3

    def upload(
        self,
        bucket: str,
        remote_path: str,
        data: bytes,
        *,
        content_type: str,
        upsert: bool,
    ) -> None:
        """
        Upload *data* as a single object.

        Args:
            bucket: Backend bucket name
            remote_path: Object key, forward-slash separated
            data: Entire file payload
            content_type: MIME type stored with the object
            upsert: Overwrite an existing object when True; otherwise the
                upload is conditional and fails if the key exists

        Raises:
            StorageConflict: If the object already exists
            StorageError: For any other backend failure
        """
        params = {
            "Bucket": bucket,
            "Key": remote_path,
            "Body": data,
            "ContentType": content_type,
        }
        if not upsert:
            params["IfNoneMatch"] = "*"
        try:
            self.s3.put_object(**params)
        except ClientError as exc:
            code, message = _client_error_details(exc)
            if is_conflict(code, message):
                raise StorageConflict(message, code) from exc
            raise StorageError(f"{code}: {message}" if code else message, code) from exc
        except BotoCoreError as exc:
            message = str(exc) or "Unknown error"
            if is_conflict("", message):
                raise StorageConflict(message) from exc
            raise StorageError(message) from exc


def create_storage_client(config: UploadConfig, s3=None) -> Optional[StorageClient]:
    """
    Create the storage client for a run.

    Returns None when dry-running, since no upload will be attempted and
    credentials may be absent.
    """
    if config.dry_run:
        return None
    if s3 is None:
        client_kwargs = {
            "aws_access_key_id": config.access_key_id,
            "aws_secret_access_key": config.secret_access_key,
        }
        if config.endpoint_url:
            client_kwargs["endpoint_url"] = config.endpoint_url
        if config.region:
            client_kwargs["region_name"] = config.region
        s3 = boto3.client("s3", **client_kwargs)
        logging.info("Storage client created for %s", config.endpoint_url or "default S3 endpoint")
    return StorageClient(s3)
