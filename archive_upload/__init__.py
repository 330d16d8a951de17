"""
Archive upload package.

Classify a local directory tree into category buckets, upload each file to
object storage and keep a resumable CSV audit log of every attempt.
"""

from . import audit_log, config, pipeline, resume, routing, storage, transfer, walker
from .audit_log import AuditLog, read_audit_log
from .config import ConfigError, UploadConfig, load_config
from .models import AuditEntry, FileRecord, Outcome, OutcomeKind, RunSummary
from .pipeline import UploadRun, preview
from .resume import ResumeError, ResumeRunner, plan_resume
from .routing import BucketId, Classifier, Skip, Upload, classify
from .storage import StorageClient, StorageConflict, StorageError
from .transfer import SizeLimitExceeded, TransferEngine
from .walker import FilesystemError, walk

__all__ = [
    "AuditEntry",
    "AuditLog",
    "BucketId",
    "Classifier",
    "ConfigError",
    "FileRecord",
    "FilesystemError",
    "Outcome",
    "OutcomeKind",
    "ResumeError",
    "ResumeRunner",
    "RunSummary",
    "SizeLimitExceeded",
    "Skip",
    "StorageClient",
    "StorageConflict",
    "StorageError",
    "TransferEngine",
    "Upload",
    "UploadConfig",
    "UploadRun",
    "audit_log",
    "classify",
    "config",
    "load_config",
    "pipeline",
    "plan_resume",
    "preview",
    "read_audit_log",
    "resume",
    "routing",
    "storage",
    "transfer",
    "walk",
    "walker",
]
