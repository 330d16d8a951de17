"""
Command-line interface and main entry point for archive_upload.

Exit codes: 0 on success, 1 on a fatal error (configuration, missing root,
no usable prior run to resume), 2 when a run finished with failed files.
"""

from __future__ import annotations

import logging
import sys

from .args_parser import config_overrides, parse_args
from .config import ConfigError, UploadConfig, load_config
from .pipeline import RunResult, UploadRun, preview
from .reports import print_preview
from .resume import ResumePolicy, ResumeError, ResumeRunner
from .routing import Classifier
from .storage import create_storage_client
from .transfer import TransferEngine
from .walker import FilesystemError


def build_engine(config: UploadConfig, classifier: Classifier) -> TransferEngine:
    """Factory wiring the storage client into a transfer engine."""
    return TransferEngine(config, classifier, create_storage_client(config))


def _exit_code(result: RunResult) -> int:
    return 2 if result.summary.fail else 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the archive upload CLI."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        config = load_config(
            str(args.env_file) if args.env_file else None,
            overrides=config_overrides(args),
        )
    except ConfigError as exc:
        logging.error("Configuration error: %s", exc)
        return 1

    classifier = Classifier()
    try:
        if args.command == "list":
            print_preview(preview(config, classifier))
            return 0
        engine = build_engine(config, classifier)
        if args.command == "run":
            return _exit_code(UploadRun(config, engine).run())
        policy = ResumePolicy.TRANSIENT if args.only_transient else ResumePolicy.ALL
        result = ResumeRunner(config, engine, classifier).run(args.log, policy)
        return _exit_code(result)
    except (FilesystemError, ResumeError) as exc:
        logging.error("%s", exc)
        return 1
