"""Human-readable interval formatting for rating previews."""

import math
from datetime import datetime

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * 60
SECONDS_PER_DAY = 24 * 60 * 60


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_interval(due: datetime, now: datetime) -> str:
    """Format the gap between ``now`` and ``due`` coarsely.

    Returns "now" under a minute, then "{m}m", "{h}h" and "{d}d", each
    rounded to the nearest unit.

    Examples:
        >>> from datetime import timedelta
        >>> t = datetime(2024, 1, 1)
        >>> format_interval(t + timedelta(minutes=10), t)
        '10m'
        >>> format_interval(t + timedelta(days=3), t)
        '3d'
    """
    seconds = (due - now).total_seconds()
    minutes = _round_half_up(seconds / SECONDS_PER_MINUTE)
    hours = _round_half_up(seconds / SECONDS_PER_HOUR)
    days = _round_half_up(seconds / SECONDS_PER_DAY)

    if minutes < 1:
        return "now"
    if minutes < 60:
        return f"{minutes}m"
    if hours < 24:
        return f"{hours}h"
    if days == 1:
        return "1d"
    return f"{days}d"
