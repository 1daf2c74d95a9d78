"""Utility functions for the analytics engine."""

import math
from datetime import datetime, timezone


def round_half_up(value: float, digits: int = 0) -> float | int:
    """Round like a UI would: halves go up, never to even.

    Returns an int when digits is 0 so percentages stay integral.
    """
    if value is None or math.isnan(value) or math.isinf(value):
        return 0
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    if digits == 0:
        return int(rounded)
    return rounded


def safe_div(numerator: float, denominator: float) -> float:
    """Divide, returning 0 when the denominator is zero."""
    if not denominator:
        return 0
    return numerator / denominator


def mean(values) -> float:
    values = list(values)
    if not values:
        return 0
    return sum(values) / len(values)


def percent(part: float, whole: float) -> int:
    """Rounded percentage of part in whole; 0 for an empty whole."""
    return round_half_up(safe_div(part, whole) * 100)


def compute_streaks(flags) -> tuple[int, int]:
    """Return (current_streak, best_streak) for a chronological run of booleans.

    The current streak is the trailing run of True values; it is 0 when the
    last flag is False.
    """
    best = 0
    run = 0
    for flag in flags:
        if flag:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return run, best


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp (or datetime) into an aware UTC datetime.

    Unparseable or missing values map to the epoch so that sorting stays total.
    """
    if isinstance(value, datetime):
        parsed = value
    elif not value:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return datetime.fromtimestamp(0, tz=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


def date_part(timestamp) -> str | None:
    """Return the YYYY-MM-DD part of a timestamp, or None."""
    if not timestamp:
        return None
    return parse_timestamp(timestamp).date().isoformat()


def normalize_chapter(chapter) -> str | None:
    """Chapters may arrive as numbers or blanks; store them as trimmed strings."""
    if chapter is None:
        return None
    text = str(chapter).strip()
    return text or None


def sort_chronologically(items: list) -> list:
    """Return records ordered oldest first by their timestamp; ties keep input order."""
    return sorted(items, key=lambda item: parse_timestamp(item.timestamp))
