"""
errors.py — Exception types for deathcounter.

Per-file problems (``ParseError``) are expected during normal operation and
never stop the watch loop.  The others are surfaced to the CLI, which
decides whether they are fatal.
"""


class DeathCounterError(RuntimeError):
    """Base class for all deathcounter errors."""


class ParseError(DeathCounterError):
    """A save file could not be read or does not match the level schema."""


class SnapshotError(DeathCounterError):
    """The watched directory could not be enumerated."""


class WatchError(DeathCounterError):
    """The filesystem observer could not be started."""


class ConfigError(DeathCounterError):
    """Invalid runtime settings."""
