"""Calendar activity from the per-day counters kept by the facade.

Everything here is relative to "now" and must not be cached with the
ledger-derived views.
"""

from datetime import timedelta

from .config import DEFAULT_CONFIG
from .utils import parse_timestamp


def empty_day() -> dict:
    return {'tests': 0, 'correct': 0, 'incorrect': 0, 'hints': 0}


def day_key(now, days_ago: int = 0) -> str:
    """UTC calendar date, days_ago days before now, as YYYY-MM-DD."""
    return (parse_timestamp(now) - timedelta(days=days_ago)).date().isoformat()


def weekly_progress(daily_progress: dict, now, config=None) -> list:
    """Per-day totals for the last week, today first."""
    config = config or DEFAULT_CONFIG
    days = []
    for offset in range(config.weekly_progress_days):
        date = day_key(now, offset)
        entry = dict(empty_day(), **daily_progress.get(date, {}))
        days.append({'date': date, **entry})
    return days


def calendar_streak(daily_progress: dict, now, config=None) -> int:
    """Consecutive days with at least one test, ending today.

    A day without tests yet today does not break the streak.
    """
    config = config or DEFAULT_CONFIG
    streak = 0
    for offset in range(config.calendar_streak_max_days):
        if daily_progress.get(day_key(now, offset), {}).get('tests', 0) > 0:
            streak += 1
        elif offset == 0:
            continue
        else:
            break
    return streak


def is_active_today(daily_progress: dict, now) -> bool:
    return daily_progress.get(day_key(now), {}).get('tests', 0) > 0
