"""Primary run orchestration and list/preview mode."""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence, TypeVar

from .audit_log import AuditLog
from .config import UploadConfig
from .models import FileRecord, Outcome, RunSummary
from .reports import print_run_header, print_run_summary
from .routing import Classifier, Skip
from .run_pointer import RunPointer
from .transfer import TransferEngine, log_outcome
from .utils import ProgressTracker, file_stamp, get_utc_now
from .walker import walk

SKIP_BUCKET_LABEL = "SKIP"
NO_EXTENSION_LABEL = "(none)"

T = TypeVar("T")


@dataclass(frozen=True)
class RunResult:
    """Counters and log location of a finished run or resume."""

    summary: RunSummary
    log_path: Path


def resolve_root(config: UploadConfig) -> Path:
    return config.local_root.expanduser().resolve()


def process_items(
    items: Sequence[T],
    handler: Callable[[T], Outcome],
    audit_log: AuditLog,
    *,
    workers: int = 1,
    label: str = "Processed",
) -> RunSummary:
    """
    Run *handler* over every item and append one audit entry per outcome.

    With ``workers > 1`` items are handled on a thread pool; each worker
    appends its own entry and the log serialises the writes.
    """
    summary = RunSummary()
    progress = ProgressTracker(total=len(items), label=label)

    def _handle(item: T) -> Outcome:
        outcome = handler(item)
        audit_log.append(outcome.to_entry(get_utc_now()))
        log_outcome(outcome)
        return outcome

    if workers <= 1:
        for idx, item in enumerate(items, start=1):
            outcome = _handle(item)
            summary.record(outcome.kind, outcome.bytes)
            progress.update(idx)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_handle, item) for item in items]
            for idx, future in enumerate(as_completed(futures), start=1):
                outcome = future.result()
                summary.record(outcome.kind, outcome.bytes)
                progress.update(idx)
    progress.finish()
    return summary


class UploadRun:  # pylint: disable=too-few-public-methods
    """Walk the root, transfer every file and record the run."""

    def __init__(self, config: UploadConfig, engine: TransferEngine):
        self.config = config
        self.engine = engine
        self.pointer = RunPointer(config.log_dir)

    def run(self) -> RunResult:
        """
        Execute a full run.

        Raises:
            FilesystemError: If the root is missing; no log is created
        """
        root = resolve_root(self.config)
        files = walk(root)
        log_path = self.config.log_dir / f"upload-{file_stamp()}.csv"

        print_run_header(self.config, log_path)
        print(f"Found {len(files):,} files")
        records = [FileRecord.from_path(root, path) for path in files]

        with AuditLog.open(log_path) as audit_log:
            summary = process_items(
                records,
                self.engine.transfer,
                audit_log,
                workers=self.config.workers,
                label="Uploading",
            )

        self.pointer.write(log_path)
        logging.info("Run pointer updated: %s", self.pointer.path)
        print_run_summary("Done.", summary, log_path)
        return RunResult(summary, log_path)


@dataclass
class PreviewReport:
    """Counts produced by list mode."""

    root: Path
    total: int = 0
    by_bucket: dict = field(default_factory=dict)
    by_extension: Counter = field(default_factory=Counter)


def preview(config: UploadConfig, classifier: Classifier) -> PreviewReport:
    """Walk and classify without touching storage, counting by bucket and extension."""
    root = resolve_root(config)
    files = walk(root)
    report = PreviewReport(root=config.local_root, total=len(files))
    report.by_bucket = {name: 0 for name in config.buckets.values()}
    report.by_bucket[SKIP_BUCKET_LABEL] = 0

    for path in files:
        record = FileRecord.from_path(root, path)
        decision = classifier.classify(record)
        if isinstance(decision, Skip):
            report.by_bucket[SKIP_BUCKET_LABEL] += 1
        else:
            name = config.bucket_name(decision.bucket)
            report.by_bucket[name] = report.by_bucket.get(name, 0) + 1
        report.by_extension[record.extension or NO_EXTENSION_LABEL] += 1
    return report
