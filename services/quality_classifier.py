"""
Quality Classifier - maps a learner's review action to an SM-2 quality score.

The review panel offers three buttons. Each maps to a fixed point on the
0-5 SM-2 quality scale:

    forgot -> 2  (failed recall)
    hard   -> 3  (recalled with difficulty)
    easy   -> 5  (recalled confidently)
"""

import logging
from enum import Enum
from typing import Union

from services.errors import InvalidActionError

logger = logging.getLogger(__name__)

# Quality at or above this is a successful recall
SUCCESSFUL_RECALL_THRESHOLD = 3

MIN_QUALITY = 0
MAX_QUALITY = 5


class ReviewAction(Enum):
    """Closed set of learner feedback actions"""
    FORGOT = "forgot"
    HARD = "hard"
    EASY = "easy"


QUALITY_BY_ACTION = {
    ReviewAction.FORGOT: 2,
    ReviewAction.HARD: 3,
    ReviewAction.EASY: 5,
}


def parse_action(action: Union[ReviewAction, str]) -> ReviewAction:
    """
    Normalize a ReviewAction or its string value into a ReviewAction.

    Raises:
        InvalidActionError: If the action is not forgot, hard or easy
    """
    if isinstance(action, ReviewAction):
        return action
    if isinstance(action, str):
        try:
            return ReviewAction(action.strip().lower())
        except ValueError:
            pass
    logger.warning(f"Rejected review action: {action!r}")
    raise InvalidActionError(action)


def classify(action: Union[ReviewAction, str]) -> int:
    """
    Map a review action to its quality score.

    Args:
        action: A ReviewAction member or its string value ("forgot", "hard", "easy")

    Returns:
        int: Quality score in 0..5

    Raises:
        InvalidActionError: If the action is not recognized

    Example:
        >>> classify("easy")
        5
        >>> classify(ReviewAction.FORGOT)
        2
    """
    return QUALITY_BY_ACTION[parse_action(action)]


def is_successful_recall(quality: int) -> bool:
    return quality >= SUCCESSFUL_RECALL_THRESHOLD
