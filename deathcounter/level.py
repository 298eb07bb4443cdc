"""
level.py — Metric parser for level save files.

A level save file is a JSON object with two count tables::

    {"deaths": {"0": 12, "37": 4}, "runs": {"0-50": 3}}

The file's contribution to the aggregate is the sum of every count in both
tables.  Anything else about the file is ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from deathcounter.errors import ParseError

# Counts are unsigned 32-bit in the game's save format.
MAX_COUNT = 2**32 - 1

COUNT_FIELDS = ("deaths", "runs")


def parse_metric(data: bytes | str) -> int:
    """Return the metric encoded in a save file's contents.

    Raises:
        ParseError: If the contents are not valid JSON, are not an object,
                    lack one of the count tables, or hold a count that is
                    not a non-negative integer within the 32-bit range.
    """
    try:
        document = json.loads(data)
    except UnicodeDecodeError as exc:
        raise ParseError(f"undecodable bytes: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"malformed JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise ParseError(f"expected a JSON object, got {type(document).__name__}")

    total = 0
    for name in COUNT_FIELDS:
        total += _sum_table(name, document.get(name))
    # Per-file sum saturates like the aggregate does.
    return min(total, MAX_COUNT)


def read_metric(path: str | Path) -> int:
    """Open *path* and return its metric.

    An unreadable file is reported as :class:`ParseError` so callers only
    need to handle one failure type per file.
    """
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise ParseError(f"cannot read {path}: {exc}") from exc
    return parse_metric(data)


def _sum_table(name: str, table: Any) -> int:
    if table is None:
        raise ParseError(f"missing field {name!r}")
    if not isinstance(table, dict):
        raise ParseError(f"field {name!r} must be an object")

    total = 0
    for key, count in table.items():
        # bool is an int subclass; true/false are not counts.
        if isinstance(count, bool) or not isinstance(count, int):
            raise ParseError(f"{name}[{key!r}] is not an integer: {count!r}")
        if count < 0 or count > MAX_COUNT:
            raise ParseError(f"{name}[{key!r}] out of range: {count}")
        total += count
    return total
