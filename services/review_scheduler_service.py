"""
Review Scheduler Service - applies a learner's review to one stored record.

This is the only part of the scheduler with side effects. It loads the
record, classifies the learner's action, advances the record through the
interval engine and persists the result. The clock is injected so the
computation stays deterministic under test.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from services.errors import ReviewRecordNotFoundError
from services.interval_engine import advance
from services.quality_classifier import classify
from services.queue_partitioner import ReviewQueues, partition
from services.review_record_repository import (
    ReviewRecordRepository,
    SQLAlchemyReviewRecordRepository,
    to_utc,
)
from services.review_stats import format_next_review_message

logger = logging.getLogger(__name__)

DEFAULT_DUE_PAGE_SIZE = 10
DEFAULT_UPCOMING_PREVIEW_SIZE = 5


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReviewSchedulerService:
    """Orchestrates review submissions and review queue reads for a learner"""

    def __init__(
        self,
        repository: Optional[ReviewRecordRepository] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.repository = repository or SQLAlchemyReviewRecordRepository()
        self.clock = clock or utc_now

    def now(self) -> datetime:
        """Current clock reading in UTC; a naive reading is taken to be UTC."""
        return to_utc(self.clock())

    def submit_review(self, user_id, question_id, action) -> dict:
        """
        Apply a learner's review of a solved question.

        Workflow:
        1. Load the review record for (user_id, question_id)
        2. Classify the action into a quality score
        3. Advance the record through the interval engine
        4. Persist the new record (compare-and-swap on review_count)
        5. Report the new interval

        Args:
            user_id: The ID of the learner
            question_id: The ID of the reviewed question
            action: "forgot", "hard", "easy" or a ReviewAction member

        Returns:
            dict: {
                'new_interval_days': int,
                'next_review_at': datetime,
                'ease_factor': float,
                'review_count': int,
                'message': str
            }

        Raises:
            ReviewRecordNotFoundError: If the learner has not solved the question
            InvalidActionError: If the action is not forgot, hard or easy
            ConcurrentReviewError: If another submission advanced the record first
            PersistenceError: If the store did not complete the write

        Example:
            >>> service.submit_review(user_id=1, question_id=42, action='easy')['new_interval_days']
            1
        """
        record = self.repository.load(user_id, question_id)
        if record is None:
            logger.error(f"No review record found: user_id={user_id}, question_id={question_id}")
            raise ReviewRecordNotFoundError(user_id, question_id)

        quality = classify(action)
        new_record = advance(record, quality, self.now())

        # Old state stays the system of record if this raises
        self.repository.save(new_record, expected_review_count=record.review_count)

        logger.info(
            f"Review submitted: user_id={user_id}, question_id={question_id}, quality={quality}, "
            f"interval {record.interval_days}->{new_record.interval_days}, "
            f"ease {record.ease_factor:.2f}->{new_record.ease_factor:.2f}, "
            f"review_count={new_record.review_count}"
        )

        return {
            'new_interval_days': new_record.interval_days,
            'next_review_at': new_record.next_review_at,
            'ease_factor': new_record.ease_factor,
            'review_count': new_record.review_count,
            'message': format_next_review_message(new_record.interval_days)
        }

    def get_review_queues(self, user_id) -> ReviewQueues:
        """Partition all of a learner's solved questions relative to the current time."""
        return partition(self.repository.list_for_user(user_id), self.now())

    def get_review_summary(
        self,
        user_id,
        due_limit: int = DEFAULT_DUE_PAGE_SIZE,
        upcoming_limit: int = DEFAULT_UPCOMING_PREVIEW_SIZE
    ) -> dict:
        """
        Review panel view: a capped due page, a capped upcoming preview and totals.

        Returns:
            dict: {
                'now': datetime,
                'due': tuple of ReviewRecord (at most due_limit),
                'upcoming': tuple of ReviewRecord (at most upcoming_limit),
                'due_count': int,
                'upcoming_count': int,
                'scheduled_count': int,
                'unscheduled_count': int
            }
        """
        if due_limit < 0 or upcoming_limit < 0:
            raise ValueError(f"Limits must be non-negative, got due={due_limit}, upcoming={upcoming_limit}")

        now = self.now()
        queues = partition(self.repository.list_for_user(user_id), now)

        return {
            'now': now,
            'due': queues.due[:due_limit],
            'upcoming': queues.upcoming[:upcoming_limit],
            'due_count': len(queues.due),
            'upcoming_count': len(queues.upcoming),
            'scheduled_count': queues.scheduled_count,
            'unscheduled_count': len(queues.unscheduled)
        }
