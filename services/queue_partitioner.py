"""
Queue Partitioner - splits a learner's review records into Due, Upcoming and Unscheduled.

Partitioning is a read-side projection over a snapshot the caller already
loaded. It performs no I/O, never mutates a record and never reschedules an
overdue item; an item overdue for months stays Due until it is reviewed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Tuple

from services.review_record import ReviewRecord


@dataclass(frozen=True)
class ReviewQueues:
    """Ordered, un-truncated review queues for one learner"""
    # next_review_at <= now, oldest-overdue first
    due: Tuple[ReviewRecord, ...] = ()
    # next_review_at > now, soonest first
    upcoming: Tuple[ReviewRecord, ...] = ()
    # next_review_at is None, input order
    unscheduled: Tuple[ReviewRecord, ...] = ()

    @property
    def scheduled_count(self) -> int:
        return len(self.due) + len(self.upcoming)


def _review_time(record: ReviewRecord) -> datetime:
    return record.next_review_at


def partition(records: Iterable[ReviewRecord], now: datetime) -> ReviewQueues:
    """
    Partition review records relative to now.

    Args:
        records: Snapshot of one learner's review records
        now: Reference instant; a record due exactly at now is Due

    Returns:
        ReviewQueues: due and upcoming sorted ascending by next_review_at.
            Records sharing a timestamp keep their input order.

    Example:
        >>> queues = partition(records, now)
        >>> [r.question_id for r in queues.due]
        [12, 4]
    """
    due = []
    upcoming = []
    unscheduled = []

    for record in records:
        if record.next_review_at is None:
            unscheduled.append(record)
        elif record.next_review_at <= now:
            due.append(record)
        else:
            upcoming.append(record)

    return ReviewQueues(
        due=tuple(sorted(due, key=_review_time)),
        upcoming=tuple(sorted(upcoming, key=_review_time)),
        unscheduled=tuple(unscheduled)
    )
