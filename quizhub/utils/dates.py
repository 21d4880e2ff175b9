from datetime import datetime
from typing import Optional

from quizhub.utils.numbers import round_half_up


def format_time_spent(total_seconds: float) -> str:
    total_seconds = int(total_seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def _plural(count: int, unit: str) -> str:
    if count == 1:
        article = "an" if unit == "hour" else "a"
        return f"{article} {unit}"
    return f"{count} {unit}s"


def relative_time(moment: datetime, now: Optional[datetime] = None) -> str:
    """Human readable distance to a past moment, e.g. "3 hours ago"."""
    now = now or datetime.now()
    seconds = (now - moment).total_seconds()
    if seconds < 45:
        return "a few seconds ago"

    minutes = round_half_up(seconds / 60)
    if minutes < 45:
        return f"{_plural(minutes, 'minute')} ago"
    hours = round_half_up(seconds / 3600)
    if hours < 22:
        return f"{_plural(hours, 'hour')} ago"
    days = round_half_up(seconds / 86400)
    if days < 26:
        return f"{_plural(days, 'day')} ago"
    if days < 320:
        return f"{_plural(max(1, round_half_up(days / 30)), 'month')} ago"
    return f"{_plural(max(1, round_half_up(days / 365)), 'year')} ago"
