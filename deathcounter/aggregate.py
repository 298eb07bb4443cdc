"""
aggregate.py — Total computation and change-gated emission.

``aggregate`` turns the cache into the number shown to the user.
``EmissionGate`` sits between that number and the output sink and makes
sure consumers only see a write when the number actually changes.
"""

from __future__ import annotations

import logging
from typing import Callable

from deathcounter.cache import FileCache

logger = logging.getLogger(__name__)

# Overlays read the total as an unsigned 32-bit value; saturate instead of
# letting it grow past what they can display.
MAX_TOTAL = 2**32 - 1


def aggregate(baseline: int, cache: FileCache) -> int:
    """Return ``baseline + sum(cache)``, saturated at :data:`MAX_TOTAL`."""
    return min(baseline + cache.total(), MAX_TOTAL)


class EmissionGate:
    """Forwards a total to *sink* only when it differs from the last one sent.

    Parameters:
        sink: Callable receiving the integer total.  An ``OSError`` raised
              by the sink is logged and the value is *not* recorded as
              emitted, so the next change triggers another attempt.
    """

    def __init__(self, sink: Callable[[int], None]) -> None:
        self._sink = sink
        self._last_emitted: int | None = None

    @property
    def last_emitted(self) -> int | None:
        """Last total successfully handed to the sink (``None`` before the first)."""
        return self._last_emitted

    def offer(self, total: int) -> bool:
        """Emit *total* if it changed.  Returns ``True`` if the sink was written."""
        if self._last_emitted is not None and total == self._last_emitted:
            logger.debug("Total unchanged (%d); emission suppressed", total)
            return False

        try:
            self._sink(total)
        except OSError as exc:
            logger.warning("Failed to write total %d: %s", total, exc)
            return False

        logger.info("Total: %d (was %s)", total, self._last_emitted)
        self._last_emitted = total
        return True
