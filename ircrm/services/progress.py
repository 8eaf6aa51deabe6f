from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress reporting for the import and export pipelines.

Pipelines report progress through a plain callback `(message, percent)`; they
never touch global state. `ProgressEmitter` wraps the caller's callback and
guarantees 0 <= percent <= 100, never decreasing within one run.
`ProgressBar` is the CLI's callback: a single tqdm bar, enabled only on a TTY
so that CI logs do not fill up with control sequences.
"""

__all__ = [
    "ProgressCallback",
    "ProgressEmitter",
    "ProgressBar",
    "is_tty_enabled",
]

ProgressCallback = Callable[[str, int], None]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressEmitter:
    """Monotonic, clamped view over an optional progress callback."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self.percent = 0

    def __call__(self, message: str, percent: float) -> None:
        value = max(self.percent, min(100, max(0, int(percent))))
        self.percent = value
        if self._callback is not None:
            self._callback(message, value)


class ProgressBar:
    """tqdm-backed progress callback (TTY only)."""

    def __init__(self, *, description: str = "Working") -> None:
        self.description = description
        self.last_message = ""
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=100,
                desc=description,
                unit="%",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, message: str, percent: int) -> None:
        self.last_message = message
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(message[:40])
            delta = percent - self.pbar.n
            if delta > 0:
                self.pbar.update(delta)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(self.description)
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressBar:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
