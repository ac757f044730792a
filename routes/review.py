"""
Review Routes - Endpoints for the spaced repetition review panel.

This module provides API endpoints for reviewing solved questions:
- GET /review/queue - Due page, upcoming preview and totals
- POST /review/submit - Submit forgot/hard/easy for a solved question
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from models.question import Question
from services.errors import (
    ConcurrentReviewError,
    InvalidActionError,
    PersistenceError,
    ReviewRecordNotFoundError,
)
from services.review_scheduler_service import ReviewSchedulerService
from services.review_stats import format_time_until_review

logger = logging.getLogger(__name__)

bp = Blueprint('review', __name__, url_prefix='/review')


def _scheduler() -> ReviewSchedulerService:
    return ReviewSchedulerService(clock=current_app.config.get('REVIEW_CLOCK'))


def _serialize_entries(records, now):
    """Attach question metadata; a question deleted after the listing read is skipped."""
    question_ids = [record.question_id for record in records]
    questions = {}
    if question_ids:
        questions = {q.id: q for q in Question.query.filter(Question.id.in_(question_ids)).all()}

    entries = []
    for record in records:
        question = questions.get(record.question_id)
        if question is None:
            continue
        entries.append({
            'question_id': record.question_id,
            'title': question.title,
            'difficulty': question.difficulty,
            'pattern_id': question.pattern_id,
            'next_review_at': record.next_review_at.isoformat() if record.next_review_at else None,
            'time_until_review': format_time_until_review(record.next_review_at, now),
            'review_count': record.review_count,
            'interval_days': record.interval_days,
            'ease_factor': record.ease_factor
        })
    return entries


@bp.route('/test')
def test():
    return jsonify({'message': 'Review blueprint working'})


@bp.route('/queue', methods=['GET'])
@login_required
def get_review_queue():
    """
    Get the learner's review panel.

    Returns:
        200: {
            "success": true,
            "due": [{"question_id": 12, "title": "...", "time_until_review": "Due now", ...}],
            "upcoming": [{"question_id": 4, "time_until_review": "In 2d", ...}],
            "due_count": 1,
            "upcoming_count": 1,
            "scheduled_count": 2,
            "unscheduled_count": 0
        }
        503: Review store unavailable
    """
    try:
        summary = _scheduler().get_review_summary(
            current_user.id,
            due_limit=current_app.config['REVIEW_DUE_PAGE_SIZE'],
            upcoming_limit=current_app.config['REVIEW_UPCOMING_PREVIEW_SIZE']
        )

        return jsonify({
            'success': True,
            'due': _serialize_entries(summary['due'], summary['now']),
            'upcoming': _serialize_entries(summary['upcoming'], summary['now']),
            'due_count': summary['due_count'],
            'upcoming_count': summary['upcoming_count'],
            'scheduled_count': summary['scheduled_count'],
            'unscheduled_count': summary['unscheduled_count']
        }), 200

    except PersistenceError as e:
        logger.error(f"Review queue unavailable for user {current_user.id}: {str(e)}")
        return jsonify({'success': False, 'error': 'Review queue is unavailable. Please retry.'}), 503

    except Exception as e:
        logger.exception(f"Error building review queue for user {current_user.id}: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to load review queue.'}), 500


@bp.route('/submit', methods=['POST'])
@login_required
def submit_review():
    """
    Submit a review for a solved question.

    Request Body:
        {
            "question_id": 42,
            "action": "easy"
        }

    Returns:
        200: {"success": true, "new_interval_days": 3, "message": "Next review in 3 days", ...}
        400: Missing fields or invalid action
        404: The question is not in the learner's review queue
        409: The review was already submitted
        503: The review could not be saved
    """
    data = request.get_json(silent=True) or {}
    question_id = data.get('question_id')
    action = data.get('action')

    if not isinstance(question_id, int) or isinstance(question_id, bool) or action is None:
        return jsonify({'success': False, 'error': 'question_id (integer) and action are required'}), 400

    try:
        result = _scheduler().submit_review(current_user.id, question_id, action)

        return jsonify({
            'success': True,
            'question_id': question_id,
            'new_interval_days': result['new_interval_days'],
            'next_review_at': result['next_review_at'].isoformat(),
            'ease_factor': result['ease_factor'],
            'review_count': result['review_count'],
            'message': result['message']
        }), 200

    except InvalidActionError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    except ReviewRecordNotFoundError:
        return jsonify({'success': False, 'error': "This question isn't in your review queue yet"}), 404

    except ConcurrentReviewError:
        return jsonify({'success': False, 'error': 'This review was already submitted'}), 409

    except PersistenceError:
        return jsonify({'success': False, 'error': 'Failed to update review. Please retry.'}), 503

    except Exception as e:
        logger.exception(f"Error submitting review for user {current_user.id}, question {question_id}: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to update review.'}), 500
