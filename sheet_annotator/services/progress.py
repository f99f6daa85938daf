from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

A single tqdm bar over the data rows of the sheet being annotated. In non-TTY
environments (CI, pipes) the bar is disabled to avoid ANSI control sequence
spam; the tracker then only counts.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ProgressTracker:
    """Row progress tracker using tqdm.

    ``enabled=False`` forces the bar off regardless of the terminal; the engine
    passes the caller's choice through so library use stays silent.
    """

    def __init__(self, total_rows: int, *, description: str = "Annotating rows", enabled: bool = True) -> None:
        self.total_rows = total_rows
        self.description = description
        self.processed = 0
        self.matched = 0

        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, matched: bool = True) -> None:
        """Count one resolved row."""
        self.processed += 1
        if matched:
            self.matched += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(matched=self.matched, unmatched=self.processed - self.matched)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
