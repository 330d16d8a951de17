"""Records passed between the walker, transfer engine, audit log and resume planner."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional


class PathTraversalError(ValueError):
    """Raised when a logged relative path points outside the upload root."""


@dataclass(frozen=True)
class FileRecord:
    """A regular file under the upload root.

    ``relative_path`` always uses forward slashes and is the identity of the
    file across runs. ``size`` is filled in just before transfer.
    """

    path: Path
    relative_path: str
    size: Optional[int] = None

    @classmethod
    def from_path(cls, root: Path, path: Path) -> "FileRecord":
        """Build a record for *path*, which must live under *root*."""
        return cls(path=path, relative_path=path.relative_to(root).as_posix())

    @classmethod
    def from_relative(cls, root: Path, relative_path: str) -> "FileRecord":
        """
        Resolve a logged relative path against the current root.

        Raises:
            PathTraversalError: If the path is absolute, contains ``..`` or
                resolves (through symlinks) outside *root*
        """
        posix = PurePosixPath(relative_path)
        if posix.is_absolute():
            raise PathTraversalError(f"Path escapes upload root: {relative_path}")
        candidate = root
        for part in posix.parts:
            if part in ("", "."):
                continue
            if part == "..":
                raise PathTraversalError(f"Path escapes upload root: {relative_path}")
            candidate /= part
        try:
            candidate.resolve().relative_to(root.resolve())
        except ValueError as exc:
            raise PathTraversalError(f"Path escapes upload root: {relative_path}") from exc
        return cls(path=candidate, relative_path=relative_path)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot, or ``""`` when there is none."""
        return os.path.splitext(self.path.name)[1].lower()

    def with_size(self, size: int) -> "FileRecord":
        return FileRecord(path=self.path, relative_path=self.relative_path, size=size)


class OutcomeKind(Enum):
    """Terminal result of one file in one run; values are the audit log status column."""

    OK = "OK"
    ALREADY_EXISTS = "EXISTS"
    FAILED = "FAIL"
    SKIPPED = "SKIP"
    DRY_RUN = "DRY_RUN"


@dataclass(frozen=True)
class Outcome:
    """What happened to a file, plus the routing facts needed to log it."""

    kind: OutcomeKind
    record: FileRecord
    bucket: str = ""
    remote_path: str = ""
    message: str = ""

    @property
    def bytes(self) -> int:
        return self.record.size or 0

    def to_entry(self, timestamp: str) -> "AuditEntry":
        return AuditEntry(
            timestamp=timestamp,
            status=self.kind,
            bucket=self.bucket,
            relative_path=self.record.relative_path,
            remote_path=self.remote_path,
            bytes=self.bytes,
            message=self.message,
        )


@dataclass(frozen=True)
class AuditEntry:  # pylint: disable=too-many-instance-attributes
    """One row of an audit log."""

    timestamp: str
    status: OutcomeKind
    bucket: str
    relative_path: str
    remote_path: str
    bytes: int
    message: str

    def to_row(self) -> list[str]:
        return [
            self.timestamp,
            self.status.value,
            self.bucket,
            self.relative_path,
            self.remote_path,
            str(self.bytes),
            self.message,
        ]


@dataclass
class RunSummary:
    """Running counters printed at the end of a run or resume."""

    ok: int = 0
    dry_run: int = 0
    exists: int = 0
    fail: int = 0
    skip: int = 0
    uploaded_bytes: int = 0

    def record(self, kind: OutcomeKind, size: int = 0) -> None:
        if kind is OutcomeKind.OK:
            self.ok += 1
            self.uploaded_bytes += size
        elif kind is OutcomeKind.DRY_RUN:
            self.dry_run += 1
        elif kind is OutcomeKind.ALREADY_EXISTS:
            self.exists += 1
        elif kind is OutcomeKind.FAILED:
            self.fail += 1
        else:
            self.skip += 1

    @property
    def total(self) -> int:
        return self.ok + self.dry_run + self.exists + self.fail + self.skip

    def as_dict(self) -> dict[str, int]:
        return {
            "ok": self.ok,
            "dry_run": self.dry_run,
            "exists": self.exists,
            "fail": self.fail,
            "skip": self.skip,
        }
