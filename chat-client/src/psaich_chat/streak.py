"""Consecutive-day usage streak."""

from datetime import datetime

SECONDS_PER_DAY = 24 * 3600

# (minimum days, suffix), highest tier first
_STREAK_TIERS: list[tuple[int, str]] = [
    (61, " 🫂"),
    (46, " 🧘🏼‍♀️"),
    (31, " 🧿"),
    (15, " 🍵"),
    (7, " 🪴"),
]


def days_between(last_login: datetime, now: datetime) -> int:
    """Whole days elapsed, rounded down."""
    return int((now - last_login).total_seconds() // SECONDS_PER_DAY)


def next_streak(current: int | None, last_login: datetime | None, now: datetime) -> int | None:
    """Compute the streak after a visit at ``now``.

    Returns None when the streak is unchanged (same day).
    """
    if last_login is None:
        return 1

    days = days_between(last_login, now)
    if days == 0:
        return None
    if days == 1:
        return (current or 0) + 1
    return 1


def streak_message(days: int) -> str:
    """Get the encouragement line shown for a streak."""
    if days >= 75:
        return "You are on the path to inner peace ☮️"
    for threshold, suffix in _STREAK_TIERS:
        if days >= threshold:
            return f"You have been taking care of yourself for {days} days{suffix}"
    return f"You have been taking care of yourself for {days} days"
