from models import db
from datetime import datetime, timezone
from sqlalchemy.orm import validates

VALID_DIFFICULTIES = ('easy', 'medium', 'hard')


class Question(db.Model):
    """Question model - practice item metadata owned by the catalog"""
    __tablename__ = 'questions'

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String, nullable=False)

    # easy, medium, hard
    difficulty = db.Column(db.String(10), nullable=False, default='medium')

    # Problem pattern the question belongs to e.g. "sliding-window"
    pattern_id = db.Column(db.String, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    progress = db.relationship('UserProgress', back_populates='question', lazy='dynamic')

    @validates('difficulty')
    def validate_difficulty(self, key, difficulty):
        if difficulty not in VALID_DIFFICULTIES:
            raise ValueError(f'Invalid difficulty: {difficulty}. Must be one of: {VALID_DIFFICULTIES}')
        return difficulty

    def __repr__(self):
        return f'<Question {self.id} - {self.title}>'
