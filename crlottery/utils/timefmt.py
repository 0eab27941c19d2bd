"""
Human-readable countdowns and timestamps.
"""

from datetime import datetime, timezone


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'}"


def format_absolute_time(timestamp: int) -> str:
    """e.g. 'Mar 5, 2026, 4:07 PM UTC'"""
    dt = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{dt:%b} {dt.day}, {dt.year}, {hour}:{dt.minute:02d} {suffix} UTC"


def format_duration(seconds: int, show_seconds: bool = True) -> str:
    """
    Format a remaining duration.

    Under a minute shows seconds, under an hour minutes, under a day
    hours and minutes, otherwise days and hours.
    """
    seconds = max(0, int(seconds))
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return _plural(seconds, "second") if show_seconds else "Less than a minute"
    if hours < 1:
        return _plural(minutes, "minute")
    if days < 1:
        rest = minutes % 60
        return _plural(hours, "hour") + (f" {_plural(rest, 'minute')}" if rest else "")
    rest = hours % 24
    return _plural(days, "day") + (f" {_plural(rest, 'hour')}" if rest else "")


def friendly_countdown(target: int, now: int, show_seconds: bool = True) -> str:
    """Countdown text to `target`; 'Ended' once reached, absolute date beyond a week."""
    remaining = int(target) - int(now)
    if remaining <= 0:
        return "Ended"
    if remaining >= 7 * 24 * 3600:
        return format_absolute_time(target)
    return format_duration(remaining, show_seconds)


def relative_time(target: int, now: int) -> str:
    """e.g. 'in 2 hours', '5 minutes ago'"""
    diff = int(target) - int(now)
    past = diff < 0
    seconds = abs(diff)

    if seconds < 60:
        return "just now" if past else "in a few seconds"

    for size, unit in ((7 * 86400, None), (86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= size:
            if unit is None:
                return format_absolute_time(target)
            text = _plural(seconds // size, unit)
            return f"{text} ago" if past else f"in {text}"
    return format_absolute_time(target)
