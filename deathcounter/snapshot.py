"""
snapshot.py — Full directory scan for deathcounter.

Builds the per-file metric table from scratch by reading every qualifying
save file in the watched directory.  The result is a best-effort view:
files appearing, vanishing or being half-written while the scan runs are
simply whatever the scan happened to see.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from deathcounter.cache import FileCache
from deathcounter.errors import ParseError, SnapshotError
from deathcounter.level import read_metric

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "json"


def canonicalize(path: str | Path) -> Path:
    """Return the absolute, symlink-resolved form of *path*.

    Works for paths that no longer exist (e.g. the subject of a delete
    event); only the existing prefix is resolved in that case.  A path that
    cannot be resolved (a symlink loop, for one) is returned absolute but
    unresolved.
    """
    try:
        return Path(path).resolve()
    except (OSError, RuntimeError):
        return Path(path).absolute()


def qualifies(path: Path, directory: Path, extension: str = DEFAULT_EXTENSION) -> bool:
    """True if canonical *path* is a metric file directly inside *directory*.

    The extension comparison is exact and case-sensitive.
    """
    return path.parent == directory and path.suffix == f".{extension}"


def build_snapshot(
    directory: str | Path,
    extension: str = DEFAULT_EXTENSION,
) -> dict[Path, int]:
    """Scan *directory* and return ``{canonical_path: metric}``.

    Files that cannot be opened or parsed are left out; that is the
    expected outcome for partially written or foreign files, not an error.

    Raises:
        SnapshotError: If the directory itself cannot be enumerated.
    """
    root = canonicalize(directory)
    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError as exc:
        raise SnapshotError(f"cannot list {root}: {exc}") from exc

    metrics: dict[Path, int] = {}
    skipped = 0
    for entry in entries:
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue

        path = canonicalize(entry.path)
        if not qualifies(path, root, extension):
            continue

        try:
            metrics[path] = read_metric(path)
        except ParseError as exc:
            skipped += 1
            logger.debug("Snapshot skipped %s: %s", path, exc)

    logger.info(
        "Snapshot of %s: %d file(s) counted, %d skipped",
        root,
        len(metrics),
        skipped,
    )
    return metrics


def rebuild(
    cache: FileCache,
    directory: str | Path,
    extension: str = DEFAULT_EXTENSION,
) -> None:
    """Replace *cache* contents with a fresh snapshot of *directory*.

    The cache is only touched once the scan has succeeded, so a
    :class:`SnapshotError` leaves the previous contents in place.
    """
    cache.replace(build_snapshot(directory, extension))
