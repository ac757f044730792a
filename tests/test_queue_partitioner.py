"""
Unit tests for the queue partitioner.

Tests Due/Upcoming/Unscheduled classification, ordering and the guarantee
that partitioning never changes a record.
"""

import sys
import os
from datetime import datetime, timedelta, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.queue_partitioner import ReviewQueues, partition
from services.review_record import ReviewRecord

NOW = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)


def scheduled(question_id, offset, interval_days=1):
    return ReviewRecord(
        user_id=1,
        question_id=question_id,
        interval_days=interval_days,
        review_count=1,
        next_review_at=NOW + offset
    )


def unscheduled(question_id):
    return ReviewRecord(user_id=1, question_id=question_id)


class TestPartition:
    """Test partition function"""

    def test_classifies_by_next_review_at(self):
        """now-1d and now are Due, now+1d is Upcoming, None is Unscheduled"""
        overdue = scheduled(1, timedelta(days=-1))
        due_now = scheduled(2, timedelta(0))
        tomorrow = scheduled(3, timedelta(days=1))
        never = unscheduled(4)

        queues = partition([tomorrow, never, due_now, overdue], NOW)

        assert queues.due == (overdue, due_now)
        assert queues.upcoming == (tomorrow,)
        assert queues.unscheduled == (never,)

    def test_due_is_oldest_overdue_first(self):
        records = [
            scheduled(1, timedelta(hours=-1)),
            scheduled(2, timedelta(days=-30)),
            scheduled(3, timedelta(days=-2)),
        ]

        queues = partition(records, NOW)

        assert [r.question_id for r in queues.due] == [2, 3, 1]

    def test_upcoming_is_soonest_first(self):
        records = [
            scheduled(1, timedelta(days=9)),
            scheduled(2, timedelta(seconds=1)),
            scheduled(3, timedelta(days=3)),
        ]

        queues = partition(records, NOW)

        assert [r.question_id for r in queues.upcoming] == [2, 3, 1]

    def test_equal_timestamps_keep_input_order(self):
        records = [scheduled(q, timedelta(days=-1)) for q in (5, 3, 9)]

        queues = partition(records, NOW)

        assert [r.question_id for r in queues.due] == [5, 3, 9]

    def test_unscheduled_keeps_input_order(self):
        records = [unscheduled(q) for q in (8, 2, 6)]

        queues = partition(records, NOW)

        assert [r.question_id for r in queues.unscheduled] == [8, 2, 6]
        assert queues.due == ()
        assert queues.upcoming == ()

    def test_empty_snapshot(self):
        queues = partition([], NOW)

        assert queues == ReviewQueues()
        assert queues.scheduled_count == 0

    def test_does_not_truncate(self):
        records = [scheduled(q, timedelta(minutes=-q)) for q in range(1, 51)]

        queues = partition(records, NOW)

        assert len(queues.due) == 50

    def test_accepts_any_iterable(self):
        queues = partition((r for r in [scheduled(1, timedelta(days=-1))]), NOW)
        assert len(queues.due) == 1

    def test_scheduled_count(self):
        records = [
            scheduled(1, timedelta(days=-1)),
            scheduled(2, timedelta(days=1)),
            scheduled(3, timedelta(days=2)),
            unscheduled(4),
        ]

        assert partition(records, NOW).scheduled_count == 3


class TestReadOnly:
    """Partitioning is a pure projection"""

    def test_idempotent(self):
        records = [
            scheduled(1, timedelta(days=-400), interval_days=200),
            scheduled(2, timedelta(days=1)),
            unscheduled(3),
        ]

        assert partition(records, NOW) == partition(records, NOW)

    def test_long_overdue_record_is_not_rescheduled(self):
        """An item overdue for a long time stays Due with its state intact"""
        record = scheduled(1, timedelta(days=-400), interval_days=200)

        queues = partition([record], NOW)

        assert queues.due[0] is record
        assert record.next_review_at == NOW - timedelta(days=400)
        assert record.interval_days == 200
