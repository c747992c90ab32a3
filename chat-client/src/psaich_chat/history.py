"""Chat history helpers: day windows and the date sidebar."""

from collections.abc import Iterable
from datetime import date, datetime, time


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Get the local [start, end] of a calendar day as aware datetimes."""
    start = datetime.combine(day, time.min).astimezone()
    end = datetime.combine(day, time.max).astimezone()
    return start, end


def collect_chat_dates(timestamps: Iterable[datetime | None], today: date) -> list[str]:
    """Collect distinct past chat days as YYYY-MM-DD, newest first.

    Today's messages belong to the live chat, not the history list.
    """
    dates: set[str] = set()
    for timestamp in timestamps:
        if timestamp is None:
            continue
        day = timestamp.astimezone().date()
        if day == today:
            continue
        dates.add(day.isoformat())
    return sorted(dates, reverse=True)


def format_chat_date(iso_date: str) -> str:
    """Render a YYYY-MM-DD date as e.g. "March 5, 2024"."""
    day = date.fromisoformat(iso_date)
    return f"{day:%B} {day.day}, {day.year}"


def filter_chat_dates(dates: list[str], search: str) -> list[str]:
    """Keep dates whose rendered form contains ``search`` (case-insensitive)."""
    needle = search.lower()
    return [d for d in dates if needle in format_chat_date(d).lower()]
