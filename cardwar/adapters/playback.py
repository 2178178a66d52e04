"""
Pacing helpers shared by autoplay and trace replay.
"""

import math
from typing import Iterable, Optional

from cardwar.war.events import RoundEvent, WarStarted

DEFAULT_PLAYBACK_DELAY_MS = 50


def has_war_event(events: Iterable[RoundEvent]) -> bool:
    """True if any of ``events`` starts a war."""
    return any(isinstance(event, WarStarted) for event in events)


def compute_playback_delay_ms(
    speed: Optional[float] = None,
    delay_ms: Optional[float] = None,
    fallback: float = DEFAULT_PLAYBACK_DELAY_MS,
) -> int:
    """
    Delay between rounds, in milliseconds.

    The base delay (``delay_ms``, or ``fallback`` when not given) is divided by
    the speed multiplier. A negative or non-finite base delay disables the
    delay; a non-positive or non-finite speed leaves the base delay unscaled.

    >>> compute_playback_delay_ms(speed=2, delay_ms=100)
    50
    >>> compute_playback_delay_ms(speed=0, delay_ms=100)
    100
    """
    base_delay = fallback if delay_ms is None else delay_ms
    multiplier = 1 if speed is None else speed
    if not math.isfinite(base_delay) or base_delay < 0:
        return 0
    if not math.isfinite(multiplier) or multiplier <= 0:
        return int(base_delay)
    return max(0, int(math.floor(base_delay / multiplier + 0.5)))
