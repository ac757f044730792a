"""
Unit tests for the SQLAlchemy review record repository.

Tests loading, listing, the compare-and-swap save and mark_solved against an
in-memory SQLite database.
"""

import sys
import os
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError

from app import create_app
from models import db
from models.question import Question
from models.user import User
from models.user_progress import UserProgress
from services.errors import ConcurrentReviewError, PersistenceError
from services.interval_engine import advance
from services.review_record_repository import SQLAlchemyReviewRecordRepository

NOW = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(scope='function')
def app_context():
    """Create a fresh app context and database for each test"""
    app = create_app('testing')
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'  # In-memory database
    app.config['TESTING'] = True

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def test_user(app_context):
    """Create a test user"""
    user = User(email='learner@example.com', name='Test Learner')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def test_questions(app_context):
    """Create a few practice questions"""
    questions = [
        Question(title='Two Sum', difficulty='easy', pattern_id='hashing'),
        Question(title='Longest Substring', difficulty='medium', pattern_id='sliding-window'),
        Question(title='Median of Two Arrays', difficulty='hard', pattern_id='binary-search'),
    ]
    db.session.add_all(questions)
    db.session.commit()
    return questions


@pytest.fixture
def repository(app_context):
    return SQLAlchemyReviewRecordRepository()


class TestMarkSolved:
    """Test mark_solved"""

    def test_creates_record_in_initial_state(self, repository, test_user, test_questions):
        record = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)

        assert record.user_id == test_user.id
        assert record.question_id == test_questions[0].id
        assert record.ease_factor == 2.5
        assert record.interval_days == 0
        assert record.review_count == 0
        assert record.next_review_at is None

        progress = UserProgress.query.filter_by(user_id=test_user.id).one()
        assert progress.is_solved is True
        assert progress.solved_at is not None

    def test_is_idempotent(self, repository, test_user, test_questions):
        repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)
        repository.mark_solved(test_user.id, test_questions[0].id, now=NOW + timedelta(days=1))

        assert UserProgress.query.filter_by(user_id=test_user.id).count() == 1

    def test_keeps_schedule_of_solved_question(self, repository, test_user, test_questions):
        first = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)
        repository.save(advance(first, 5, NOW), expected_review_count=0)

        again = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)

        assert again.review_count == 1
        assert again.interval_days == 1

    def test_flags_existing_unsolved_row(self, repository, test_user, test_questions):
        db.session.add(UserProgress(user_id=test_user.id, question_id=test_questions[1].id, is_solved=False))
        db.session.commit()
        assert repository.load(test_user.id, test_questions[1].id) is None

        record = repository.mark_solved(test_user.id, test_questions[1].id, now=NOW)

        assert record.review_count == 0
        assert repository.load(test_user.id, test_questions[1].id) == record


class TestLoad:
    """Test load and list_for_user"""

    def test_missing_record(self, repository, test_user, test_questions):
        assert repository.load(test_user.id, test_questions[0].id) is None

    def test_round_trips_aware_timestamps(self, repository, test_user, test_questions):
        record = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)
        advanced = advance(record, 5, NOW)
        repository.save(advanced, expected_review_count=0)

        loaded = repository.load(test_user.id, test_questions[0].id)

        assert loaded == advanced
        assert loaded.next_review_at.tzinfo is not None

    def test_list_only_solved_for_user(self, repository, test_user, test_questions):
        other = User(email='other@example.com')
        db.session.add(other)
        db.session.commit()

        repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)
        repository.mark_solved(test_user.id, test_questions[2].id, now=NOW)
        repository.mark_solved(other.id, test_questions[1].id, now=NOW)
        db.session.add(UserProgress(user_id=test_user.id, question_id=test_questions[1].id, is_solved=False))
        db.session.commit()

        records = repository.list_for_user(test_user.id)

        assert [r.question_id for r in records] == [test_questions[0].id, test_questions[2].id]

    def test_list_skips_deleted_questions(self, repository, test_user, test_questions):
        repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)
        repository.mark_solved(test_user.id, test_questions[1].id, now=NOW)
        deleted_id = test_questions[0].id

        Question.query.filter_by(id=deleted_id).delete()
        db.session.commit()

        records = repository.list_for_user(test_user.id)

        assert [r.question_id for r in records] == [test_questions[1].id]

    def test_load_failure_raises_persistence_error(self, repository, test_user):
        user_id = test_user.id

        with patch('sqlalchemy.orm.Query.first', side_effect=SQLAlchemyError('database is locked')):
            with pytest.raises(PersistenceError):
                repository.load(user_id, 1)


class TestSave:
    """Test save with the review_count compare-and-swap"""

    def test_persists_new_state(self, repository, test_user, test_questions):
        record = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)

        repository.save(advance(record, 3, NOW), expected_review_count=0)

        progress = UserProgress.query.filter_by(user_id=test_user.id).one()
        assert progress.review_count == 1
        assert progress.interval_days == 1
        assert progress.ease_factor == pytest.approx(2.36)
        assert progress.next_review_at is not None

    def test_stale_write_is_rejected(self, repository, test_user, test_questions):
        """A second write computed from the same snapshot must not apply"""
        stale = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)
        repository.save(advance(stale, 5, NOW), expected_review_count=0)

        with pytest.raises(ConcurrentReviewError):
            repository.save(advance(stale, 2, NOW), expected_review_count=0)

        current = repository.load(test_user.id, test_questions[0].id)
        assert current.review_count == 1
        assert current.ease_factor == pytest.approx(2.6)

    def test_concurrent_error_is_persistence_error(self):
        assert issubclass(ConcurrentReviewError, PersistenceError)

    def test_commit_failure_leaves_old_state(self, repository, test_user, test_questions):
        record = repository.mark_solved(test_user.id, test_questions[0].id, now=NOW)

        with patch('sqlalchemy.orm.Session.commit', side_effect=SQLAlchemyError('disk I/O error')):
            with pytest.raises(PersistenceError):
                repository.save(advance(record, 5, NOW), expected_review_count=0)

        assert repository.load(test_user.id, test_questions[0].id) == record
