"""Recursive enumeration of the regular files under the upload root."""

from __future__ import annotations

import logging
import os
from pathlib import Path


class FilesystemError(OSError):
    """Raised when the root is missing or a file cannot be read."""


def _walk_dir(directory: Path, out: list[Path]) -> None:
    with os.scandir(directory) as entries:
        for entry in entries:
            full = directory / entry.name
            if entry.is_dir(follow_symlinks=False):
                _walk_dir(full, out)
            elif entry.is_file(follow_symlinks=False):
                out.append(full)


def walk(root: Path) -> list[Path]:
    """
    Return absolute paths of every regular file under *root*, depth first.

    Order is whatever the filesystem enumerates; callers that need a stable
    order must sort. Symbolic links and special files are not returned and
    linked directories are not followed.

    Raises:
        FilesystemError: If root does not exist, is not a directory, or a
            directory under it cannot be listed
    """
    root = Path(root).expanduser()
    if not root.exists():
        raise FilesystemError(f"Root directory does not exist: {root}")
    if not root.is_dir():
        raise FilesystemError(f"Root is not a directory: {root}")
    out: list[Path] = []
    try:
        _walk_dir(root.resolve(), out)
    except OSError as exc:
        raise FilesystemError(f"Failed to walk {root}: {exc}") from exc
    logging.debug("Walked %s: %d files", root, len(out))
    return out
