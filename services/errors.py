"""Errors raised by the review scheduler"""


class ReviewError(Exception):
    """Base class for review scheduling errors"""


class ReviewRecordNotFoundError(ReviewError, LookupError):
    """No review record exists for the (user, question) pair"""

    def __init__(self, user_id, question_id):
        self.user_id = user_id
        self.question_id = question_id
        super().__init__(
            f"No review record for user {user_id}, question {question_id}. "
            f"The question must be solved before it can be reviewed."
        )


class InvalidActionError(ReviewError, ValueError):
    """Review action outside the forgot/hard/easy enumeration"""

    def __init__(self, action):
        self.action = action
        super().__init__(f"Invalid review action: {action!r}. Must be one of: forgot, hard, easy")


class PersistenceError(ReviewError, RuntimeError):
    """The review record store did not complete a write"""


class ConcurrentReviewError(PersistenceError):
    """Another submission advanced the record between load and save"""
