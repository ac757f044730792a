"""Read-side helpers for the review panel and retention analytics"""

from datetime import datetime
from typing import Iterable, Optional

from services.interval_engine import round_half_up
from services.review_record import INITIAL_EASE_FACTOR, ReviewRecord

SECONDS_PER_HOUR = 60 * 60
HOURS_PER_DAY = 24


def format_time_until_review(next_review_at: Optional[datetime], now: datetime) -> str:
    """
    Short label for how far away a review is.

    Returns "Due now" once the review time has passed, "In 3d" / "In 5h"
    for whole days or hours remaining, and "Due soon" inside the last hour.
    Unscheduled records get "Not scheduled".

    Example:
        >>> format_time_until_review(now + timedelta(hours=30), now)
        'In 1d'
    """
    if next_review_at is None:
        return "Not scheduled"

    remaining = (next_review_at - now).total_seconds()
    if remaining <= 0:
        return "Due now"

    hours = int(remaining // SECONDS_PER_HOUR)
    days = hours // HOURS_PER_DAY
    if days > 0:
        return f"In {days}d"
    if hours > 0:
        return f"In {hours}h"
    return "Due soon"


def format_next_review_message(interval_days: int) -> str:
    unit = "day" if interval_days == 1 else "days"
    return f"Next review in {interval_days} {unit}"


def average_ease_factor(records: Iterable[ReviewRecord]) -> float:
    """Mean ease factor, or the initial 2.5 when there are no records."""
    eases = [record.ease_factor for record in records]
    if not eases:
        return INITIAL_EASE_FACTOR
    return sum(eases) / len(eases)


def retention_score(records: Iterable[ReviewRecord]) -> int:
    """
    Retention score on a 0-100 scale.

    The initial ease factor of 2.5 counts as full retention; scores above 100
    are capped.
    """
    ratio = average_ease_factor(records) / INITIAL_EASE_FACTOR
    return min(100, round_half_up(ratio * 100))
