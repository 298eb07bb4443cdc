"""
events.py — Shared event schema for deathcounter.

Defines the ChangeEvent dataclass that the monitoring layer emits and the
reconciler consumes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class EventKind(Enum):
    """Categories of directory change the reconciler understands."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    AMBIGUOUS_RENAME = "ambiguous_rename"


@dataclass(frozen=True)
class ChangeEvent:
    """A single categorized change notification.

    Attributes:
        kind:      What happened.
        paths:     Canonical paths affected by this notification.  Always
                   empty for ``AMBIGUOUS_RENAME``, which concerns the whole
                   directory.
        timestamp: Unix epoch time when the event was observed.
    """

    kind: EventKind
    paths: tuple[Path, ...] = ()
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def created(cls, *paths: Path) -> ChangeEvent:
        return cls(EventKind.CREATED, tuple(paths))

    @classmethod
    def modified(cls, *paths: Path) -> ChangeEvent:
        return cls(EventKind.MODIFIED, tuple(paths))

    @classmethod
    def removed(cls, *paths: Path) -> ChangeEvent:
        return cls(EventKind.REMOVED, tuple(paths))

    @classmethod
    def ambiguous_rename(cls) -> ChangeEvent:
        return cls(EventKind.AMBIGUOUS_RENAME)
