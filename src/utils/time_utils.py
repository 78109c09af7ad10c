"""Time and formatting helpers for countdown rendering.

All functions here are pure: they take epoch milliseconds and return plain
values, so frame rendering can be driven by an explicit instant instead of
the wall clock.
"""

import time
from typing import Any, Mapping, NamedTuple

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60

ANIMATION_FLAGS = ('1', 'true', 'gif')


class DurationParts(NamedTuple):
    days: int
    hours: int
    minutes: int
    seconds: int

    @property
    def total_seconds(self) -> int:
        return (self.days * SECONDS_PER_DAY + self.hours * SECONDS_PER_HOUR
                + self.minutes * SECONDS_PER_MINUTE + self.seconds)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def breakdown_duration(diff_ms: float) -> DurationParts:
    """Split a millisecond difference into days/hours/minutes/seconds.

    Negative differences clamp to zero so an expired countdown freezes at
    00:00:00 instead of going negative.
    """
    total_seconds = max(0, int(diff_ms // 1000))
    days = total_seconds // SECONDS_PER_DAY
    hours = (total_seconds % SECONDS_PER_DAY) // SECONDS_PER_HOUR
    minutes = (total_seconds % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE
    seconds = total_seconds % SECONDS_PER_MINUTE
    return DurationParts(days, hours, minutes, seconds)


def pad(value: int) -> str:
    return f"{value:02d}"


def bucket_now(timestamp_ms: int, bucket_seconds: int) -> int:
    """Quantize a timestamp to the start of its cache bucket window."""
    bucket_ms = max(1, int(bucket_seconds)) * 1000
    return (int(timestamp_ms) // bucket_ms) * bucket_ms


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def wants_animation(query: Mapping[str, Any]) -> bool:
    """True iff the caller explicitly asked for an animated countdown.

    ``animated`` wins over ``format``; only the literals in ANIMATION_FLAGS
    (case-insensitive) count as a yes.
    """
    raw = _first(query.get('animated')) or _first(query.get('format')) or ''
    return str(raw).lower() in ANIMATION_FLAGS
