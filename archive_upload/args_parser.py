"""
Argument parsing for the archive upload CLI.

Three sub-commands: ``list`` (preview routing), ``run`` (walk and upload) and
``resume`` (retry the last run's failures and skips).
"""

from __future__ import annotations

import argparse
from pathlib import Path


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by every sub-command."""
    parser.add_argument("--env-file", type=Path, help="Path to a .env file (default: ./.env).")
    parser.add_argument("--root", type=Path, help="Override LOCAL_ROOT.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")


def add_transfer_arguments(parser: argparse.ArgumentParser) -> None:
    """Options for the sub-commands that upload."""
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Classify and log without uploading (overrides DRY_RUN).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Upload with this many worker threads (default: UPLOAD_WORKERS or 1).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Classify a local directory tree and upload each file to its category bucket.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Preview routing counts without uploading.")
    add_common_arguments(list_parser)

    run_parser = subparsers.add_parser("run", help="Walk the root and upload every file.")
    add_common_arguments(run_parser)
    add_transfer_arguments(run_parser)

    resume_parser = subparsers.add_parser(
        "resume", help="Retry FAIL and SKIP rows from the last run's log."
    )
    add_common_arguments(resume_parser)
    add_transfer_arguments(resume_parser)
    resume_parser.add_argument(
        "--log",
        type=Path,
        help="Prior audit log to resume from (default: the log named in latest.json).",
    )
    resume_parser.add_argument(
        "--only-transient",
        action="store_true",
        help="Retry only FAIL rows and size-limit skips instead of every SKIP row.",
    )
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse and validate command-line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)
    workers = getattr(args, "workers", None)
    if workers is not None and workers <= 0:
        parser.error("--workers must be positive.")
    return args


def config_overrides(args: argparse.Namespace) -> dict:
    """Map CLI flags onto UploadConfig fields; unset flags are omitted."""
    overrides = {
        "local_root": args.root,
        "dry_run": getattr(args, "dry_run", None),
        "workers": getattr(args, "workers", None),
    }
    if args.command == "list":
        # Listing never uploads, so credentials are not required.
        overrides["dry_run"] = True
    return {key: value for key, value in overrides.items() if value is not None}
