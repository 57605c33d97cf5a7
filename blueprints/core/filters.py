from __future__ import annotations
from datetime import datetime, timezone


def fmt_date(value: datetime | None) -> str:
    if not value:
        return ""
    return value.strftime("%d.%m.%Y")


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def time_ago(value: datetime | None, now: datetime | None = None) -> str:
    """Relative display time for the notification list ("2 hours ago")."""
    if not value:
        return ""
    now = now or datetime.now(value.tzinfo or timezone.utc)
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute") + " ago"
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour") + " ago"
    days = hours // 24
    if days < 30:
        return _plural(days, "day") + " ago"
    return fmt_date(value)
