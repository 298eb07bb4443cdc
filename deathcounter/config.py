"""
config.py — Runtime settings for the watcher.

Settings come from the command line; ``WatchConfig.from_args`` turns the
parsed namespace into a validated, immutable object.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from deathcounter.errors import ConfigError
from deathcounter.reconciler import RetentionPolicy
from deathcounter.snapshot import DEFAULT_EXTENSION


@dataclass(frozen=True)
class WatchConfig:
    """Validated watcher settings.

    Attributes:
        directory:     Save directory to watch.
        output:        File to overwrite with the total, or ``None`` for stdout.
        baseline:      Offset added to every total.
        poll_interval: Poll period in seconds, or ``None`` for native events.
        extension:     Qualifying file extension (no dot, case-sensitive).
        retention:     What happens to a cached value whose file stops parsing.
    """

    directory: Path
    output: Path | None = None
    baseline: int = 0
    poll_interval: float | None = None
    extension: str = DEFAULT_EXTENSION
    retention: RetentionPolicy = RetentionPolicy.RETAIN

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> WatchConfig:
        """Build a config from the CLI namespace (interval is in milliseconds)."""
        interval_ms = args.interval
        config = cls(
            directory=Path(args.path),
            output=Path(args.output) if args.output else None,
            baseline=args.baseline,
            poll_interval=interval_ms / 1000.0 if interval_ms is not None else None,
            extension=args.extension.lstrip("."),
            retention=RetentionPolicy(args.on_parse_error),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise :class:`ConfigError` if any setting is unusable."""
        if self.baseline < 0:
            raise ConfigError(f"baseline must be non-negative, got {self.baseline}")
        if self.poll_interval is not None and self.poll_interval <= 0:
            raise ConfigError(f"poll interval must be positive, got {self.poll_interval}")
        if not self.extension:
            raise ConfigError("extension must not be empty")
        if not self.directory.is_dir():
            raise ConfigError(f"not a directory: {self.directory}")
