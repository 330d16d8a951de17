"""Shared helpers for the upload scripts: timestamps, sizes and progress output."""

from __future__ import annotations

import time
from datetime import datetime, timezone

BYTES_PER_KIB = 1024
BYTES_PER_MIB = BYTES_PER_KIB**2

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600


def get_utc_now() -> str:
    """Get current UTC timestamp as ISO format string"""
    return datetime.now(timezone.utc).isoformat()


def file_stamp() -> str:
    """UTC timestamp safe for use in a file name (no colons)."""
    return get_utc_now().replace(":", "-")


def format_size(num_bytes: int | None) -> str:
    """Convert byte count to a human-readable string using binary units."""
    if num_bytes is None:
        return "n/a"
    units = ["B", "KiB", "MiB", "GiB", "TiB"]
    value = float(num_bytes)
    for unit in units:
        if value < BYTES_PER_KIB or unit == units[-1]:
            return f"{value:.2f} {unit}"
        value /= BYTES_PER_KIB
    return f"{value:.2f} {units[-1]}"


def format_duration(seconds: float) -> str:
    """Format seconds to human readable duration"""
    if seconds < SECONDS_PER_MINUTE:
        return f"{int(seconds)}s"
    if seconds < SECONDS_PER_HOUR:
        minutes = int(seconds / SECONDS_PER_MINUTE)
        secs = int(seconds % SECONDS_PER_MINUTE)
        return f"{minutes}m {secs}s"
    hours = int(seconds / SECONDS_PER_HOUR)
    minutes = int((seconds % SECONDS_PER_HOUR) / SECONDS_PER_MINUTE)
    return f"{hours}h {minutes}m"


class ProgressTracker:
    """Prints a throttled ``label: current/total`` line while a run progresses."""

    def __init__(self, total: int, label: str, update_interval: float = 2.0):
        self.total = total
        self.label = label
        self.update_interval = update_interval
        self.last_update = 0.0
        self.start = time.time()

    def update(self, current: int) -> None:
        """Update progress display if update interval has elapsed."""
        now = time.time()
        if current == self.total or now - self.last_update >= self.update_interval:
            if self.total:
                pct = (current / self.total) * 100
                status = f"{current:,}/{self.total:,} ({pct:5.1f}%)"
            else:
                status = f"{current:,}"
            print(f"\r{self.label}: {status}", end="", flush=True)
            self.last_update = now

    def finish(self) -> None:
        """Print final newline and elapsed time."""
        print(f"  [{format_duration(time.time() - self.start)}]")
