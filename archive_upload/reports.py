"""Console reporting for runs, resumes and list mode."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .config import UploadConfig
from .models import RunSummary
from .utils import format_size

if TYPE_CHECKING:
    from .pipeline import PreviewReport

TOP_EXTENSIONS = 30
RULE = "=" * 70


def _print_table(rows: dict, key_header: str, value_header: str = "Count") -> None:
    width = max([len(key_header)] + [len(str(key)) for key in rows])
    print(f"  {key_header:<{width}}  {value_header:>8}")
    print(f"  {'-' * width}  {'-' * 8}")
    for key, value in rows.items():
        print(f"  {str(key):<{width}}  {value:>8,}")


def print_run_header(config: UploadConfig, log_path: Path) -> None:
    """Print the effective settings of a run before it starts."""
    print(RULE)
    print("ARCHIVE UPLOAD")
    print(RULE)
    print(f"LOCAL_ROOT:    {config.local_root}")
    print(f"REMOTE_PREFIX: {config.remote_prefix}")
    print(f"MAX_MB:        {config.max_mb}")
    print(f"UPSERT:        {config.upsert}")
    print(f"DRY_RUN:       {config.dry_run}")
    print(f"Buckets:       {', '.join(f'{b.value}={n}' for b, n in config.buckets.items())}")
    if not config.dry_run:
        print(f"Endpoint:      {config.endpoint_url or 'default S3 endpoint'}")
    print(f"Log:           {log_path}")
    print(RULE)


def print_run_summary(title: str, summary: RunSummary, log_path: Path) -> None:
    """Print the end-of-run counters and where the log was written."""
    print()
    print(RULE)
    print(title)
    print(RULE)
    _print_table(summary.as_dict(), "Outcome")
    print(f"\nUploaded: {format_size(summary.uploaded_bytes)}")
    print(f"\nLog saved: {log_path}")
    print(RULE)


def print_preview(report: "PreviewReport") -> None:
    """Print list-mode counts by bucket and the most common extensions."""
    print(f"LOCAL_ROOT: {report.root}")
    print(f"Total files: {report.total:,}")
    print("\nBy bucket (including SKIP):")
    _print_table(report.by_bucket, "Bucket")
    print("\nTop extensions:")
    top = dict(report.by_extension.most_common(TOP_EXTENSIONS))
    _print_table(top, "Extension")
