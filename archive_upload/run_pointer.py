"""File-backed pointer to the most recent primary run's audit log."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

POINTER_FILE_NAME = "latest.json"


class RunPointerError(ValueError):
    """Raised when the pointer file exists but cannot be parsed."""


class RunPointer:
    """``<log_dir>/latest.json`` holding ``{"log_path": ...}``.

    Written only at the end of a primary run; read by resume.
    """

    def __init__(self, log_dir: Path):
        self.path = Path(log_dir) / POINTER_FILE_NAME

    def write(self, log_path: Path) -> None:
        """Atomically replace the pointer with *log_path*."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({"log_path": str(log_path)}, indent=2)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".latest-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def read(self) -> Optional[Path]:
        """
        Return the logged path, or None when no primary run has completed.

        Raises:
            RunPointerError: If the pointer file is not a JSON object
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise RunPointerError(f"Corrupt run pointer {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise RunPointerError(f"Corrupt run pointer {self.path}: expected an object")
        log_path = data.get("log_path")
        return Path(log_path) if log_path else None
