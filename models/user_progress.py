from models import db
from datetime import datetime, timezone
from sqlalchemy.orm import validates

from services.review_record import ReviewRecord, INITIAL_EASE_FACTOR, MIN_EASE_FACTOR


def _as_utc(value):
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class UserProgress(db.Model):
    """UserProgress model - per (user, question) solve state with spaced repetition scheduling"""
    __tablename__ = 'user_progress'

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    question_id = db.Column(db.Integer, db.ForeignKey('questions.id'), nullable=False)

    is_solved = db.Column(db.Boolean, nullable=False, default=False)
    solved_at = db.Column(db.DateTime(timezone=True))

    # SM-2 scheduling state
    ease_factor = db.Column(db.Float, nullable=False, default=INITIAL_EASE_FACTOR)
    interval_days = db.Column(db.Integer, nullable=False, default=0)
    review_count = db.Column(db.Integer, nullable=False, default=0)

    # NULL until the question enters the review cycle
    next_review_at = db.Column(db.DateTime(timezone=True))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    user = db.relationship('User', back_populates='progress')
    question = db.relationship('Question', back_populates='progress')

    # Unique constraint on (user_id, question_id) and index on (user_id, next_review_at)
    __table_args__ = (
        db.UniqueConstraint('user_id', 'question_id', name='uq_user_question_progress'),
        db.Index('idx_user_next_review_at', 'user_id', 'next_review_at'),
    )

    @validates('ease_factor')
    def validate_ease_factor(self, key, value):
        if value is not None and value < MIN_EASE_FACTOR:
            raise ValueError(f'ease_factor must be at least {MIN_EASE_FACTOR}, got: {value}')
        return value

    @validates('interval_days', 'review_count')
    def validate_non_negative(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f'{key} must be non-negative, got: {value}')
        return value

    def to_record(self) -> ReviewRecord:
        """Snapshot the scheduling columns as an immutable ReviewRecord."""
        return ReviewRecord(
            user_id=self.user_id,
            question_id=self.question_id,
            ease_factor=self.ease_factor,
            interval_days=self.interval_days,
            review_count=self.review_count,
            next_review_at=_as_utc(self.next_review_at)
        )

    def __repr__(self):
        return (
            f'<UserProgress user_id={self.user_id} question_id={self.question_id} '
            f'reviews={self.review_count} interval={self.interval_days}>'
        )
