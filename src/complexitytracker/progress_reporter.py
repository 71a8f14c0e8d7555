"""
Progress display for batch analysis runs.

The engine reports each finished file; the reporter keeps running totals
of files, function units and parse failures and prints a throttled status
line to stderr so stdout stays clean for the report itself.
"""

import sys
import threading
import time
from typing import Optional, TextIO


class ProgressReporter:
    """Tracks and displays the progress of one analysis batch.

    Worker threads finish files concurrently, so every counter update
    happens under a lock.
    """

    def __init__(self,
                 interval_seconds: float = 5.0,
                 min_files: int = 50,
                 silent: bool = False,
                 stream: Optional[TextIO] = None):
        """
        Initialize ProgressReporter.

        Args:
            interval_seconds: Minimum seconds between two status lines
            min_files: Batches smaller than this are not displayed
            silent: If True, suppress all progress output
            stream: Output stream (default: stderr)
        """
        self.interval_seconds = interval_seconds
        self.min_files = min_files
        self.silent = silent
        self.stream = stream
        self._lock = threading.Lock()
        self.start(0)

    def start(self, total_files: int) -> None:
        """Reset the counters for a new batch of ``total_files`` files."""
        with self._lock:
            self.total_files = total_files
            self.files_done = 0
            self.functions = 0
            self.failures = 0
            self.started_at = time.monotonic()
            self._last_shown = None

    def file_done(self, functions: int, failures: int = 0) -> None:
        """Record one finished file and print a status line when one is due."""
        with self._lock:
            self.files_done += 1
            self.functions += functions
            self.failures += failures
            if not self._due():
                return
            self._last_shown = time.monotonic()
            line = self.format_status()

        print(line, file=self.stream or sys.stderr)

    def _due(self) -> bool:
        if self.silent or self.total_files < self.min_files:
            return False
        # First and last file are always shown
        if self._last_shown is None or self.files_done >= self.total_files:
            return True
        return time.monotonic() - self._last_shown >= self.interval_seconds

    def format_status(self) -> str:
        """Render the current totals, e.g. ``[120/400 files] 1,530 functions (30%)``."""
        percentage = self.files_done * 100 // self.total_files if self.total_files else 0
        line = f"   [{self.files_done:,}/{self.total_files:,} files] {self.functions:,} functions"
        if self.failures:
            line += f", {self.failures:,} parse errors"
        line += f" ({percentage}%)"

        elapsed = time.monotonic() - self.started_at
        if 0 < self.files_done < self.total_files and elapsed > 0:
            remaining = (self.total_files - self.files_done) * elapsed / self.files_done
            line += f" ~{remaining:.0f}s left"
        return line
