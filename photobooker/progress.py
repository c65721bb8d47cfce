"""
Per-page progress reporting for terminal output.
"""

import sys
import time
from dataclasses import dataclass, field
from typing import TextIO


@dataclass
class ProgressStats:
    """Statistics for progress tracking."""

    total: int
    current: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time


def format_time(seconds: float) -> str:
    """Format seconds as human-readable time."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    else:
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"


class PageProgress:
    """Prints 'Processing page X of N...Done' lines.

    Usage:
        with PageProgress(total=len(records)) as progress:
            for n, record in enumerate(records, start=1):
                progress.start(n)
                normalize(record)
                progress.done()
    """

    def __init__(self, total: int, desc: str = "Processing page", output: TextIO | None = None):
        self.stats = ProgressStats(total=total)
        self.desc = desc
        self._output = output or sys.stdout
        self._open = False

    def __enter__(self):
        self.stats.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.finish()
        elif self._open:
            self._output.write("Failed\n")
            self._output.flush()

    def start(self, number: int) -> None:
        """Announce that page `number` is being worked on."""
        self._output.write(f"{self.desc} {number} of {self.stats.total}...")
        self._output.flush()
        self._open = True

    def done(self) -> None:
        """Mark the announced page as complete."""
        self.stats.current += 1
        self._output.write("Done\n")
        self._output.flush()
        self._open = False

    def finish(self) -> None:
        """Print a summary line."""
        self._output.write(
            f"Processed {self.stats.current}/{self.stats.total} pages "
            f"({format_time(self.stats.elapsed)})\n"
        )
        self._output.flush()
