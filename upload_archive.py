#!/usr/bin/env python3
"""
Classify a local directory tree and upload each file to its category bucket.

Usage:
    python upload_archive.py list      # Preview routing counts
    python upload_archive.py run       # Walk, classify and upload
    python upload_archive.py resume    # Retry the last run's FAIL/SKIP rows

This is a thin wrapper around the archive_upload package.
"""
from __future__ import annotations

from archive_upload.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
