"""
Interval Engine - adapted SM-2 transition for a single review record.

advance() is a pure function of (record, quality, now). It performs no I/O
and never mutates its input, so it is safe to call from any thread.

Transition rules:

SUCCESSFUL RECALL (quality >= 3):
- review_count 0 -> interval 1 day
- review_count 1 -> interval 3 days
- otherwise      -> round_half_up(interval_days * ease_factor)
- ease_factor += 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02), floored at 1.3

FAILED RECALL (quality < 3):
- interval resets to 1 day, whatever the previous interval was
- ease_factor -= 0.2, floored at 1.3

Both branches set next_review_at = now + interval (calendar days) and
increment review_count by exactly 1. A failure does not reset review_count.
"""

import math
from datetime import datetime, timedelta

from services.quality_classifier import (
    MAX_QUALITY,
    MIN_QUALITY,
    is_successful_recall,
)
from services.review_record import MIN_EASE_FACTOR, ReviewRecord


FIRST_REVIEW_INTERVAL_DAYS = 1
SECOND_REVIEW_INTERVAL_DAYS = 3
FAILED_RECALL_INTERVAL_DAYS = 1
FAILED_RECALL_EASE_PENALTY = 0.2


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (6.5 -> 7, where round() gives 6)."""
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    SM-2 ease factor update.

    The formula only applies to successful recalls; failures take the flat
    penalty instead.
    """
    if not is_successful_recall(quality):
        return max(MIN_EASE_FACTOR, ease_factor - FAILED_RECALL_EASE_PENALTY)

    miss = MAX_QUALITY - quality
    updated = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(MIN_EASE_FACTOR, updated)


def next_interval_days(record: ReviewRecord, quality: int) -> int:
    if not is_successful_recall(quality):
        return FAILED_RECALL_INTERVAL_DAYS

    if record.review_count == 0:
        return FIRST_REVIEW_INTERVAL_DAYS
    if record.review_count == 1:
        return SECOND_REVIEW_INTERVAL_DAYS
    return max(1, round_half_up(record.interval_days * record.ease_factor))


def _check_preconditions(record: ReviewRecord, quality: int) -> None:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValueError(f"quality must be an integer, got: {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValueError(f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got: {quality}")
    if record.ease_factor < MIN_EASE_FACTOR:
        raise ValueError(f"ease_factor must be at least {MIN_EASE_FACTOR}, got: {record.ease_factor}")
    if record.interval_days < 0:
        raise ValueError(f"interval_days must be non-negative, got: {record.interval_days}")
    if record.review_count < 0:
        raise ValueError(f"review_count must be non-negative, got: {record.review_count}")


def advance(record: ReviewRecord, quality: int, now: datetime) -> ReviewRecord:
    """
    Compute the record's state after one completed review.

    Args:
        record: Current scheduling state
        quality: Recall quality in 0..5 (see quality_classifier.classify)
        now: The instant the review was submitted

    Returns:
        ReviewRecord: A new record; the input is left untouched

    Raises:
        ValueError: If the inputs are outside the documented domain

    Example:
        >>> record = ReviewRecord(user_id=1, question_id=7)
        >>> advance(record, 5, datetime(2025, 1, 1, 9, 30)).next_review_at
        datetime.datetime(2025, 1, 2, 9, 30)
    """
    _check_preconditions(record, quality)

    interval = next_interval_days(record, quality)

    # timedelta(days=n) moves the calendar date and keeps the time of day,
    # including across DST changes for zone-aware datetimes
    return record.evolve(
        ease_factor=next_ease_factor(record.ease_factor, quality),
        interval_days=interval,
        review_count=record.review_count + 1,
        next_review_at=now + timedelta(days=interval)
    )
