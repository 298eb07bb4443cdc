"""
sinks.py — Output destinations for the running total.

Both sinks are plain callables taking the integer total, which is all the
emission gate needs.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, TextIO


class FileSink:
    """Overwrites *path* with the decimal total on every call."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __call__(self, total: int) -> None:
        with open(self.path, "w", encoding="ascii") as fh:
            fh.write(str(total))

    def __repr__(self) -> str:
        return f"FileSink({str(self.path)!r})"


class ConsoleSink:
    """Writes the total as one line to *stream* (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def __call__(self, total: int) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(f"{total}\n")
        stream.flush()

    def __repr__(self) -> str:
        return "ConsoleSink()"


def make_sink(output: str | Path | None) -> Callable[[int], None]:
    """File sink when *output* is set, console sink otherwise."""
    if output is None:
        return ConsoleSink()
    return FileSink(output)
