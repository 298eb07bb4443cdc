"""
cache.py — Per-file metric cache.

Maps canonical file paths to the last successfully parsed metric for that
file.  The cache has exactly one owner (the reconciliation loop), so it
carries no locking.
"""

from __future__ import annotations

from pathlib import Path


class FileCache:
    """Mapping of canonical path → last-known metric.

    Entry order is irrelevant; :meth:`total` is defined over the full value
    set.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, int] = {}

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    def get(self, path: Path) -> int | None:
        return self._entries.get(path)

    def upsert(self, path: Path, metric: int) -> None:
        if metric < 0:
            raise ValueError(f"metric must be non-negative, got {metric}")
        self._entries[path] = metric

    def remove(self, path: Path) -> int | None:
        """Drop *path* and return its cached metric.

        Removing a path that is not cached is a no-op and returns ``None``.
        """
        return self._entries.pop(path, None)

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._entries.clear()

    def replace(self, entries: dict[Path, int]) -> None:
        """Swap the whole contents for *entries* (used by full rescans)."""
        self.clear()
        for path, metric in entries.items():
            self.upsert(path, metric)

    def total(self) -> int:
        """Sum of all cached metrics."""
        return sum(self._entries.values())

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def paths(self) -> set[Path]:
        return set(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"FileCache(files={len(self._entries)}, total={self.total()})"
