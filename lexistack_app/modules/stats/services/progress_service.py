# File: lexistack_app/modules/stats/services/progress_service.py
from datetime import datetime, timedelta, timezone

from flask import current_app
from sqlalchemy import case, func

from lexistack_app.models import db, CollectionWord, PracticeSession, PracticeSessionWord, User, UserWord
from lexistack_app.modules.shared.utils.db_session import safe_commit


def _as_utc(value):
    """SQLite hands datetimes back without tzinfo; they are stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_streak(practice_days, today):
    """Number of consecutive days with practice ending ``today``."""
    days = set(practice_days)
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


class ProgressService:
    """Profile statistics: words learned, accuracy, streak and last practice."""

    @staticmethod
    def _finalised_sessions(user_id):
        return PracticeSession.query.filter(
            PracticeSession.user_id == user_id,
            PracticeSession.completed_at.isnot(None),
        )

    @staticmethod
    def refresh_user_stats(user_id):
        """Recompute the stored statistics of a user. Returns the user or None."""
        try:
            user = db.session.get(User, user_id)
            if user is None:
                return None

            user.words_learned = UserWord.query.filter_by(user_id=user_id).count()

            finalised = ProgressService._finalised_sessions(user_id)
            # Both counts come from the outcome rows, which word removal prunes
            recorded, correct = (
                db.session.query(
                    func.count(PracticeSessionWord.id),
                    func.coalesce(func.sum(case((PracticeSessionWord.is_correct, 1), else_=0)), 0),
                )
                .join(PracticeSession, PracticeSession.id == PracticeSessionWord.session_id)
                .filter(PracticeSession.user_id == user_id, PracticeSession.completed_at.isnot(None))
                .one()
            )
            user.accuracy = round(100.0 * (correct or 0) / recorded, 1) if recorded else 0.0

            completions = [_as_utc(s.completed_at) for s in finalised.with_entities(PracticeSession.completed_at)]
            today = datetime.now(timezone.utc).date()
            user.streak_count = compute_streak((c.date() for c in completions if c), today)
            user.last_practice_at = max((c for c in completions if c), default=None)

            safe_commit(db.session)
            return user
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error refreshing stats for user {user_id}: {e}", exc_info=True)
            return None

    @staticmethod
    def words_due(user_id, now=None):
        """Distinct words not yet known whose review is due or was never scheduled."""
        now = now or datetime.now(timezone.utc)
        return (
            db.session.query(func.count(func.distinct(CollectionWord.word_id)))
            .filter(
                CollectionWord.user_id == user_id,
                CollectionWord.status != CollectionWord.STATUS_KNOWN,
                (CollectionWord.next_review_at.is_(None)) | (CollectionWord.next_review_at <= now),
            )
            .scalar()
        ) or 0

    @staticmethod
    def get_progress(user_id):
        user = db.session.get(User, user_id)
        if user is None:
            return None

        streak = user.streak_count or 0
        last = _as_utc(user.last_practice_at)
        # A streak only survives while yesterday or today had practice
        if last is None or (datetime.now(timezone.utc).date() - last.date()).days > 1:
            streak = 0

        return {
            'words_learned': user.words_learned or 0,
            'accuracy': round(user.accuracy or 0.0, 1),
            'streak_count': streak,
            'last_practice_at': last.isoformat() if last else None,
            'words_due': ProgressService.words_due(user_id),
            'sessions_completed': ProgressService._finalised_sessions(user_id).count(),
        }
