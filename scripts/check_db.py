"""
Database Health Check Script
Verifies that the review tables exist and reports review queue totals
"""

from app import create_app
from models import db
from models.question import Question
from models.user import User
from models.user_progress import UserProgress
from sqlalchemy import inspect


def check_database(config_name='development'):
    """Check if database is working correctly"""
    app = create_app(config_name)

    with app.app_context():
        try:
            print("=" * 60)
            print("DATABASE HEALTH CHECK")
            print("=" * 60)

            # Check if tables exist
            inspector = inspect(db.engine)
            tables = inspector.get_table_names()

            expected_tables = ['users', 'questions', 'user_progress']

            missing_tables = set(expected_tables) - set(tables)
            if missing_tables:
                print(f"\n❌ MISSING TABLES: {missing_tables}")
                return False

            print(f"\n✅ All {len(expected_tables)} expected tables exist")

            # Check record counts
            print("\n📊 Record Counts:")
            solved = UserProgress.query.filter_by(is_solved=True)
            counts = {
                'Users': User.query.count(),
                'Questions': Question.query.count(),
                'Solved Questions': solved.count(),
                'Scheduled Reviews': solved.filter(UserProgress.next_review_at.isnot(None)).count(),
            }

            for name, count in counts.items():
                print(f"  - {name}: {count}")

            # Stored state must respect the scheduler invariants
            broken = solved.filter(
                db.or_(
                    UserProgress.ease_factor < 1.3,
                    db.and_(UserProgress.next_review_at.isnot(None), UserProgress.interval_days < 1)
                )
            ).count()
            if broken:
                print(f"\n⚠️  WARNING: {broken} review records violate scheduling invariants")
                return False

            print("\n" + "=" * 60)
            print("✅ DATABASE IS HEALTHY!")
            print("=" * 60)
            return True

        except Exception as e:
            print("\n" + "=" * 60)
            print(f"❌ DATABASE ERROR: {e}")
            print("=" * 60)
            return False


if __name__ == '__main__':
    check_database()
