"""
Progress Routes - Solve tracking and retention analytics.

- POST /progress/solved - Mark a question solved, creating its review record
- GET /progress/retention - Retention score from the learner's ease factors
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from models import db
from models.question import Question
from services.errors import PersistenceError
from services.review_record_repository import SQLAlchemyReviewRecordRepository
from services.review_scheduler_service import utc_now
from services.review_stats import average_ease_factor, retention_score

logger = logging.getLogger(__name__)

bp = Blueprint('progress', __name__, url_prefix='/progress')


@bp.route('/test')
def test():
    return jsonify({'message': 'Progress blueprint working'})


@bp.route('/solved', methods=['POST'])
@login_required
def mark_solved():
    """
    Mark a question solved for the current learner.

    Request Body:
        {"question_id": 42}

    Returns:
        200: {"success": true, "question_id": 42, "review_count": 0, "scheduled": false}
        400: Missing question_id
        404: Unknown question
        503: Store unavailable
    """
    data = request.get_json(silent=True) or {}
    question_id = data.get('question_id')

    if not isinstance(question_id, int) or isinstance(question_id, bool):
        return jsonify({'success': False, 'error': 'question_id (integer) is required'}), 400

    if db.session.get(Question, question_id) is None:
        return jsonify({'success': False, 'error': f'Question {question_id} not found'}), 404

    clock = current_app.config.get('REVIEW_CLOCK') or utc_now

    try:
        record = SQLAlchemyReviewRecordRepository().mark_solved(current_user.id, question_id, now=clock())
    except PersistenceError:
        return jsonify({'success': False, 'error': 'Failed to save progress. Please retry.'}), 503

    return jsonify({
        'success': True,
        'question_id': question_id,
        'review_count': record.review_count,
        'scheduled': record.is_scheduled
    }), 200


@bp.route('/retention', methods=['GET'])
@login_required
def get_retention():
    """
    Retention score for the current learner.

    Returns:
        200: {"success": true, "retention_score": 96, "average_ease_factor": 2.4, "solved_count": 7}
    """
    try:
        records = SQLAlchemyReviewRecordRepository().list_for_user(current_user.id)
    except PersistenceError:
        return jsonify({'success': False, 'error': 'Failed to load progress. Please retry.'}), 503

    return jsonify({
        'success': True,
        'retention_score': retention_score(records),
        'average_ease_factor': round(average_ease_factor(records), 2),
        'solved_count': len(records)
    }), 200
