"""ReviewRecord value type - the scheduling state of one (user, question) pair"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


@dataclass(frozen=True)
class ReviewRecord:
    """
    Immutable snapshot of a learner's review state for one question.

    A record is created when the question is first marked solved with
    review_count=0, ease_factor=2.5, interval_days=0 and no next_review_at.
    The interval engine returns new records rather than mutating this one.
    """
    user_id: Any
    question_id: Any
    ease_factor: float = INITIAL_EASE_FACTOR
    interval_days: int = 0
    review_count: int = 0
    next_review_at: Optional[datetime] = None

    @property
    def is_scheduled(self) -> bool:
        return self.next_review_at is not None

    def evolve(self, **changes) -> 'ReviewRecord':
        return replace(self, **changes)
