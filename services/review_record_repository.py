"""
Review Record Repository - loads and saves one ReviewRecord at a time.

The scheduler only depends on the ReviewRecordRepository interface. The
SQLAlchemy implementation keeps the records in the user_progress table and
serializes concurrent submissions for the same (user, question) pair with a
compare-and-swap on review_count.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.question import Question
from models.user_progress import UserProgress
from services.errors import ConcurrentReviewError, PersistenceError
from services.review_record import INITIAL_EASE_FACTOR, ReviewRecord

logger = logging.getLogger(__name__)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReviewRecordRepository(ABC):
    """Storage interface for review records keyed by (user_id, question_id)"""

    @abstractmethod
    def load(self, user_id, question_id) -> Optional[ReviewRecord]:
        """Return the record for a solved question, or None."""

    @abstractmethod
    def list_for_user(self, user_id) -> List[ReviewRecord]:
        """Return the record of every solved question that still exists, for one learner."""

    @abstractmethod
    def save(self, record: ReviewRecord, expected_review_count: int) -> None:
        """
        Persist record if the stored review_count still equals expected_review_count.

        Raises:
            ConcurrentReviewError: If another write advanced the record first
            PersistenceError: If the store did not complete the write
        """


class SQLAlchemyReviewRecordRepository(ReviewRecordRepository):
    """ReviewRecordRepository backed by the user_progress table"""

    def _solved_rows(self, user_id):
        return UserProgress.query.filter_by(user_id=user_id, is_solved=True)

    def load(self, user_id, question_id) -> Optional[ReviewRecord]:
        try:
            progress = self._solved_rows(user_id).filter_by(question_id=question_id).first()
        except SQLAlchemyError as e:
            logger.error(
                f"Database error loading review record for user_id={user_id}, "
                f"question_id={question_id}: {str(e)}",
                exc_info=True
            )
            db.session.rollback()
            raise PersistenceError(f"Failed to load review record: {str(e)}") from e

        return progress.to_record() if progress else None

    def list_for_user(self, user_id) -> List[ReviewRecord]:
        try:
            # Inner join: rows whose question was deleted stay out of the queues and counts
            rows = (
                self._solved_rows(user_id)
                .join(Question, Question.id == UserProgress.question_id)
                .order_by(UserProgress.id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error listing review records for user_id={user_id}: {str(e)}", exc_info=True)
            db.session.rollback()
            raise PersistenceError(f"Failed to list review records: {str(e)}") from e

        return [row.to_record() for row in rows]

    def save(self, record: ReviewRecord, expected_review_count: int) -> None:
        try:
            updated = UserProgress.query.filter_by(
                user_id=record.user_id,
                question_id=record.question_id,
                is_solved=True,
                review_count=expected_review_count
            ).update(
                {
                    'ease_factor': record.ease_factor,
                    'interval_days': record.interval_days,
                    'review_count': record.review_count,
                    'next_review_at': to_utc(record.next_review_at),
                    'updated_at': datetime.now(timezone.utc),
                },
                synchronize_session=False
            )

            if updated == 0:
                db.session.rollback()
                logger.warning(
                    f"Review record changed since it was loaded: user_id={record.user_id}, "
                    f"question_id={record.question_id}, expected review_count={expected_review_count}"
                )
                raise ConcurrentReviewError(
                    f"Review for user {record.user_id}, question {record.question_id} "
                    f"was already submitted"
                )

            db.session.commit()

        except SQLAlchemyError as e:
            logger.error(
                f"Failed to save review record for user_id={record.user_id}, "
                f"question_id={record.question_id}: {str(e)}",
                exc_info=True
            )
            db.session.rollback()
            raise PersistenceError(f"Failed to save review record: {str(e)}") from e

    def mark_solved(self, user_id, question_id, now: Optional[datetime] = None) -> ReviewRecord:
        """
        Record that a learner solved a question, creating its review record.

        New rows start outside the review cycle (interval 0, no next_review_at).
        Calling this again for an already solved question changes nothing.

        Args:
            user_id: The ID of the learner
            question_id: The ID of the solved question
            now: Solve timestamp (defaults to the current UTC time)

        Returns:
            ReviewRecord: The record as stored

        Raises:
            PersistenceError: If the database write fails
        """
        solved_at = to_utc(now) or datetime.now(timezone.utc)

        try:
            progress = UserProgress.query.filter_by(user_id=user_id, question_id=question_id).first()

            if progress is None:
                progress = UserProgress(
                    user_id=user_id,
                    question_id=question_id,
                    is_solved=True,
                    solved_at=solved_at,
                    ease_factor=INITIAL_EASE_FACTOR,
                    interval_days=0,
                    review_count=0,
                    next_review_at=None
                )
                db.session.add(progress)
                logger.info(f"Created review record: user_id={user_id}, question_id={question_id}")
            elif not progress.is_solved:
                progress.is_solved = True
                progress.solved_at = solved_at
                logger.info(f"Marked existing progress solved: user_id={user_id}, question_id={question_id}")
            else:
                logger.debug(f"Question already solved: user_id={user_id}, question_id={question_id}")
                return progress.to_record()

            db.session.commit()
            return progress.to_record()

        except SQLAlchemyError as e:
            logger.error(
                f"Failed to mark question solved for user_id={user_id}, question_id={question_id}: {str(e)}",
                exc_info=True
            )
            db.session.rollback()
            raise PersistenceError(f"Failed to mark question solved: {str(e)}") from e
