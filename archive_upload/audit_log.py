"""
Append-only CSV audit log: one row per file per run.

Each row is written with a single ``write`` call followed by flush and fsync,
under a lock, so a crash or concurrent workers never leave an interleaved or
partial row behind. Readers ignore a trailing fragment, whether it lacks its
newline or stops inside a quoted field.
"""

from __future__ import annotations

import csv
import io
import logging
import os
import threading
from pathlib import Path
from typing import Iterable

from .models import AuditEntry, OutcomeKind

HEADER = ["timestamp", "status", "bucket", "relative_path", "remote_path", "bytes", "message"]


class AuditLogError(ValueError):
    """Raised when an existing log cannot be parsed."""


def format_csv_line(fields: Iterable[object]) -> str:
    """Encode one row; fields with a comma, quote or newline are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(["" if value is None else str(value) for value in fields])
    return buffer.getvalue()


class AuditLog:
    """Handle to an open audit log file."""

    def __init__(self, path: Path, handle):
        self.path = path
        self._handle = handle
        self._lock = threading.Lock()
        self.entries_written = 0

    @classmethod
    def open(cls, path: Path) -> "AuditLog":
        """Create (or truncate) the log at *path* and write the header row."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # pylint: disable=consider-using-with
        handle = open(path, "w", encoding="utf-8", newline="")
        log = cls(path, handle)
        log._write_line(format_csv_line(HEADER), counts=False)
        return log

    def _write_line(self, line: str, *, counts: bool = True) -> None:
        with self._lock:
            if self._handle.closed:
                raise ValueError(f"Audit log {self.path} is closed")
            self._handle.write(line)
            self._handle.flush()
            os.fsync(self._handle.fileno())
            if counts:
                self.entries_written += 1

    def append(self, entry: AuditEntry) -> None:
        """Durably append one entry."""
        self._write_line(format_csv_line(entry.to_row()))

    def close(self) -> None:
        with self._lock:
            if not self._handle.closed:
                self._handle.close()

    def __enter__(self) -> "AuditLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _parse_bytes(value: str) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def _iter_rows(reader, path: Path, line_count: int):
    """Yield parsed rows; a final row cut off inside a quoted field is dropped."""
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            if reader.line_num >= line_count:
                logging.warning("Ignoring incomplete final row in %s: %s", path, exc)
                return
            raise AuditLogError(f"Malformed row at line {reader.line_num} of {path}: {exc}") from exc
        yield row


def read_audit_log(path: Path) -> list[AuditEntry]:
    """
    Parse an audit log back into entries.

    Raises:
        FileNotFoundError: If the log does not exist
        AuditLogError: If the header row is not the expected one, or a row
            before the last one is malformed
    """
    text = Path(path).read_text(encoding="utf-8")
    if text and not text.endswith("\n"):
        text = text[: text.rfind("\n") + 1]
        logging.warning("Ignoring incomplete final line in %s", path)

    line_count = sum(1 for _ in io.StringIO(text, newline=""))
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    rows = _iter_rows(reader, path, line_count)
    header = next(rows, None)
    if header != HEADER:
        raise AuditLogError(f"Unexpected audit log header in {path}: {header}")

    entries: list[AuditEntry] = []
    for row in rows:
        if not row:
            continue
        row = (row + [""] * len(HEADER))[: len(HEADER)]
        timestamp, status, bucket, relative_path, remote_path, size, message = row
        try:
            kind = OutcomeKind(status)
        except ValueError:
            logging.warning("Skipping row with unknown status %r in %s", status, path)
            continue
        entries.append(
            AuditEntry(
                timestamp=timestamp,
                status=kind,
                bucket=bucket,
                relative_path=relative_path,
                remote_path=remote_path,
                bytes=_parse_bytes(size),
                message=message,
            )
        )
    return entries
