"""
Resume: replay the failed and skipped rows of a previous run.

The candidate set comes from the prior audit log, never from the filesystem.
Each resume writes its own new log and leaves the prior log and the run
pointer untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .audit_log import AuditLog, AuditLogError, read_audit_log
from .config import UploadConfig
from .models import (
    AuditEntry,
    FileRecord,
    Outcome,
    OutcomeKind,
    PathTraversalError,
    RunSummary,
)
from .pipeline import RunResult, process_items, resolve_root
from .reports import print_run_summary
from .routing import Classifier, Skip
from .run_pointer import RunPointer, RunPointerError
from .transfer import (
    OVER_SIZE_PREFIX,
    ROUTING_SKIP_PREFIX,
    SizeLimitExceeded,
    TransferEngine,
    check_size,
    make_remote_path,
)
from .utils import file_stamp

LOCAL_FILE_MISSING = "Local file missing"
STILL_OVER_PREFIX = "Still over "


class ResumeError(RuntimeError):
    """Raised when there is no usable prior run to resume from."""


class ResumePolicy(Enum):
    """Which prior rows are replayed."""

    ALL = "all"  # every FAIL and SKIP row
    TRANSIENT = "transient"  # FAIL rows and size-limit skips only


def _is_size_skip(entry: AuditEntry) -> bool:
    return entry.message.startswith((OVER_SIZE_PREFIX, STILL_OVER_PREFIX))


def should_retry(entry: AuditEntry, policy: ResumePolicy = ResumePolicy.ALL) -> bool:
    if entry.status is OutcomeKind.FAILED:
        return True
    if entry.status is OutcomeKind.SKIPPED:
        return policy is ResumePolicy.ALL or _is_size_skip(entry)
    return False


@dataclass(frozen=True)
class ResumeCandidate:
    """A file to retry, with whatever routing the prior run logged for it."""

    record: FileRecord
    bucket: str = ""
    remote_path: str = ""
    prior_status: OutcomeKind = OutcomeKind.FAILED
    prior_bytes: int = 0


def plan_resume(
    prior_log_path: Path,
    config: UploadConfig,
    policy: ResumePolicy = ResumePolicy.ALL,
) -> list[ResumeCandidate]:
    """
    Select the rows of a prior log that should be retried.

    Relative paths are resolved against the current root. Rows without a
    relative path, or whose path leads outside the root, are dropped and
    repeated paths are kept once (first wins).

    Raises:
        ResumeError: If the prior log cannot be read or parsed
    """
    root = resolve_root(config)
    try:
        entries = read_audit_log(prior_log_path)
    except (AuditLogError, OSError) as exc:
        raise ResumeError(f"Cannot read prior log {prior_log_path}: {exc}") from exc

    seen: set[str] = set()
    candidates: list[ResumeCandidate] = []
    for entry in entries:
        if not entry.relative_path or not should_retry(entry, policy):
            continue
        if entry.relative_path in seen:
            continue
        seen.add(entry.relative_path)
        try:
            record = FileRecord.from_relative(root, entry.relative_path)
        except PathTraversalError as exc:
            logging.warning("Skipping row from %s: %s", prior_log_path, exc)
            continue
        candidates.append(
            ResumeCandidate(
                record=record,
                bucket=entry.bucket,
                remote_path=entry.remote_path,
                prior_status=entry.status,
                prior_bytes=entry.bytes,
            )
        )
    return candidates


def locate_prior_log(config: UploadConfig) -> Path:
    """Find the last primary run's log through the run pointer."""
    pointer = RunPointer(config.log_dir)
    try:
        log_path = pointer.read()
    except RunPointerError as exc:
        raise ResumeError(str(exc)) from exc
    if log_path is None:
        raise ResumeError(f"No {pointer.path} found. Run an upload first.")
    if not log_path.exists():
        raise ResumeError(f"Log file not found: {log_path}")
    return log_path


class ResumeRunner:
    """Retries resume candidates through the normal upload path."""

    def __init__(self, config: UploadConfig, engine: TransferEngine, classifier: Classifier):
        self.config = config
        self.engine = engine
        self.classifier = classifier

    def retry(self, candidate: ResumeCandidate) -> Outcome:
        """Produce the outcome for one candidate."""
        record = candidate.record
        if not record.path.is_file():
            return Outcome(
                OutcomeKind.FAILED,
                record.with_size(candidate.prior_bytes),
                candidate.bucket,
                candidate.remote_path,
                LOCAL_FILE_MISSING,
            )
        try:
            record = record.with_size(record.path.stat().st_size)
            check_size(record.size, self.config)
        except SizeLimitExceeded:
            return Outcome(
                OutcomeKind.SKIPPED,
                record,
                candidate.bucket,
                candidate.remote_path,
                f"{STILL_OVER_PREFIX}{self.config.max_mb}MB",
            )
        except OSError as exc:
            return Outcome(OutcomeKind.FAILED, record, message=f"Cannot stat file: {exc}")

        bucket, remote_path = candidate.bucket, candidate.remote_path
        if not bucket or not remote_path:
            decision = self.classifier.classify(record)
            if isinstance(decision, Skip):
                return Outcome(
                    OutcomeKind.SKIPPED, record, message=f"{ROUTING_SKIP_PREFIX}{decision.reason}"
                )
            bucket = self.config.bucket_name(decision.bucket)
            remote_path = make_remote_path(self.config, decision.bucket, record.relative_path)
        return self.engine.upload_routed(record, bucket, remote_path)

    def run(
        self,
        prior_log_path: Optional[Path] = None,
        policy: ResumePolicy = ResumePolicy.ALL,
    ) -> RunResult:
        """
        Retry the prior run's failures into a new log.

        Raises:
            ResumeError: If no prior log can be found
        """
        if prior_log_path is None:
            prior_log_path = locate_prior_log(self.config)
        elif not Path(prior_log_path).exists():
            raise ResumeError(f"Log file not found: {prior_log_path}")

        candidates = plan_resume(prior_log_path, self.config, policy)
        print(f"Retrying {len(candidates):,} items from: {prior_log_path}")
        print(f"DRY_RUN: {self.config.dry_run}")

        log_path = self.config.log_dir / f"resume-{file_stamp()}.csv"
        logging.info("Resume of %s writing to %s", prior_log_path, log_path)
        with AuditLog.open(log_path) as audit_log:
            if candidates:
                summary = process_items(
                    candidates,
                    self.retry,
                    audit_log,
                    workers=self.config.workers,
                    label="Retrying",
                )
            else:
                summary = RunSummary()
        print_run_summary(f"Resume of {prior_log_path} complete.", summary, log_path)
        return RunResult(summary, log_path)
