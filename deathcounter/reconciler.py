"""
reconciler.py — Incremental cache maintenance for deathcounter.

Applies one ChangeEvent at a time to the FileCache:
  1. Created / Modified  → re-parse each qualifying path and upsert.
  2. Removed             → drop each qualifying path.
  3. Ambiguous rename    → throw the cache away and rescan the directory.
  4. Recompute the total and offer it to the emission gate, once per event.

What happens to a cached value when its file stops parsing is decided by
the RetentionPolicy the reconciler is built with.

This module is the only writer of the cache and the only caller of the
gate.  It must be driven from a single thread.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from deathcounter.aggregate import MAX_TOTAL, EmissionGate, aggregate
from deathcounter.cache import FileCache
from deathcounter.errors import ParseError, SnapshotError
from deathcounter.events import ChangeEvent, EventKind
from deathcounter.level import read_metric
from deathcounter.snapshot import DEFAULT_EXTENSION, canonicalize, qualifies, rebuild

logger = logging.getLogger(__name__)


class RetentionPolicy(Enum):
    """What to do with a cached value when its file fails to parse.

    RETAIN: keep the last good value (a file caught mid-write keeps
            counting until it parses again).
    EVICT:  drop the value until the file parses again.
    """

    RETAIN = "retain"
    EVICT = "evict"


class Reconciler:
    """Single-owner state machine over incoming change events.

    Parameters:
        directory: Watched directory.  Canonicalized on construction.
        gate:      Emission gate receiving recomputed totals.
        baseline:  Offset added to every total.
        extension: Qualifying file extension, without the dot.
        retention: Policy applied when a changed file fails to parse.
        cache:     Cache to maintain (a fresh one by default).
    """

    def __init__(
        self,
        directory: str | Path,
        gate: EmissionGate,
        baseline: int = 0,
        extension: str = DEFAULT_EXTENSION,
        retention: RetentionPolicy = RetentionPolicy.RETAIN,
        cache: FileCache | None = None,
    ) -> None:
        if baseline < 0:
            raise ValueError(f"baseline must be non-negative, got {baseline}")
        self.directory = canonicalize(directory)
        self.gate = gate
        self.baseline = baseline
        self.extension = extension
        self.retention = retention
        self.cache = cache if cache is not None else FileCache()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def rescan(self) -> bool:
        """Rebuild the cache from disk and offer the resulting total.

        Raises:
            SnapshotError: If the directory cannot be listed.  The cache is
                           left as it was.
        """
        rebuild(self.cache, self.directory, self.extension)
        return self._emit()

    def handle(self, event: ChangeEvent) -> bool:
        """Apply *event* to the cache and offer the new total.

        Returns ``True`` if the event touched at least one qualifying path
        (or forced a rescan), ``False`` if it was ignored entirely.  An
        ignored event causes no recomputation.
        """
        logger.debug(
            "Event at %.3f: %s %s",
            event.timestamp,
            event.kind.value,
            [str(p) for p in event.paths],
        )

        if event.kind is EventKind.AMBIGUOUS_RENAME:
            self._handle_rename()
        else:
            paths = self._qualifying(event.paths)
            if not paths:
                return False
            if event.kind is EventKind.REMOVED:
                for path in paths:
                    self._remove(path)
            else:
                for path in paths:
                    self._refresh(path)

        self._emit()
        return True

    def total(self) -> int:
        return aggregate(self.baseline, self.cache)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _qualifying(self, paths: tuple[Path, ...]) -> list[Path]:
        # Backends normally deliver canonical paths; resolving again is a
        # no-op for those and fixes up anything that is not.
        canonical = (canonicalize(p) for p in paths)
        return [p for p in canonical if qualifies(p, self.directory, self.extension)]

    def _refresh(self, path: Path) -> None:
        # Opening a FIFO would block the loop.
        if not path.is_file():
            self._apply_retention(path, ParseError("not a regular file"))
            return
        try:
            metric = read_metric(path)
        except ParseError as exc:
            self._apply_retention(path, exc)
            return
        previous = self.cache.get(path)
        self.cache.upsert(path, metric)
        logger.debug("%s: %s -> %d", path.name, previous, metric)

    def _apply_retention(self, path: Path, exc: ParseError) -> None:
        if self.retention is RetentionPolicy.EVICT:
            dropped = self.cache.remove(path)
            logger.warning("Could not parse %s (%s); evicted value %s", path.name, exc, dropped)
        elif path in self.cache:
            logger.warning(
                "Could not parse %s (%s); keeping last value %d",
                path.name,
                exc,
                self.cache.get(path),
            )
        else:
            logger.debug("Could not parse %s (%s); not counted", path.name, exc)

    def _remove(self, path: Path) -> None:
        dropped = self.cache.remove(path)
        if dropped is not None:
            logger.debug("%s removed (-%d)", path.name, dropped)

    def _handle_rename(self) -> None:
        logger.info("Rename in %s; rescanning directory", self.directory)
        try:
            rebuild(self.cache, self.directory, self.extension)
        except SnapshotError as exc:
            # Keep running on the previous cache; it may be stale until the
            # next successful rescan.
            logger.error("Rescan failed, cache may be stale: %s", exc)

    def _emit(self) -> bool:
        total = self.total()
        if total == MAX_TOTAL:
            logger.warning("Total saturated at %d", MAX_TOTAL)
        return self.gate.offer(total)
