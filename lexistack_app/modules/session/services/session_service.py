from datetime import datetime, timedelta, timezone

from flask import current_app

from lexistack_app.core.signals import session_completed
from lexistack_app.models import db, CollectionWord, PracticeSession, PracticeSessionWord, PracticeSnapshot
from lexistack_app.modules.shared.utils.db_session import insert_or_fetch, safe_commit


class PracticeSessionService:
    """
    Service layer for practice sessions and their per-word outcome rows.

    Every write catches its own errors, rolls back, logs and reports failure
    as ``None``/``False`` so callers never see an exception.
    """

    @staticmethod
    def create_session(user_id, mode, total_words=0):
        """Create a new practice session row. Returns the session id or None."""
        if mode not in PracticeSession.MODES:
            current_app.logger.warning(f"Refusing to start practice session with unknown mode '{mode}'")
            return None
        try:
            new_session = PracticeSession(
                user_id=user_id,
                mode=mode,
                total_words=total_words,
                correct_answers=0,
                completed=False,
            )
            db.session.add(new_session)
            safe_commit(db.session)
            return new_session.id
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error creating practice session for user {user_id}: {e}", exc_info=True)
            return None

    @staticmethod
    def record_word(session_id, word_id, meaning_id, collection_id, is_correct):
        """
        Insert the outcome row for one word. A row that already exists for
        (session, word) counts as success and is left untouched.
        """
        try:
            session = db.session.get(PracticeSession, session_id)
            if session is None:
                current_app.logger.warning(f"Cannot record word {word_id}: practice session {session_id} not found")
                return False

            key = {'session_id': session_id, 'word_id': word_id}
            if PracticeSessionWord.query.filter_by(**key).first() is not None:
                return True

            # Review bookkeeping is committed together with the outcome row
            PracticeSessionService._touch_collection_word(
                session.user_id, word_id, meaning_id, collection_id
            )
            insert_or_fetch(
                db.session,
                PracticeSessionWord,
                key,
                defaults={
                    'user_id': session.user_id,
                    'meaning_id': meaning_id,
                    'collection_id': collection_id,
                    'is_correct': is_correct,
                },
            )
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(
                f"Error recording word {word_id} for practice session {session_id}: {e}", exc_info=True
            )
            return False

    @staticmethod
    def _touch_collection_word(user_id, word_id, meaning_id, collection_id):
        """Bump review bookkeeping on the collection entries behind a recorded word. Does not commit."""
        query = CollectionWord.query.filter_by(user_id=user_id, word_id=word_id)
        if meaning_id is not None:
            query = query.filter_by(meaning_id=meaning_id)
        if collection_id is not None:
            query = query.filter_by(collection_id=collection_id)

        now = datetime.now(timezone.utc)
        for entry in query.all():
            entry.review_count = (entry.review_count or 0) + 1
            entry.last_reviewed_at = now

    @staticmethod
    def complete_session(session_id, correct_count, is_fully_completed, recorded_count):
        """
        Finalise a session exactly once.

        A session that recorded nothing (``recorded_count == 0`` and no word
        rows in the store) is deleted instead of being marked complete.
        """
        try:
            session = db.session.get(PracticeSession, session_id)
            if session is None:
                current_app.logger.warning(f"Cannot complete practice session {session_id}: not found")
                return False

            if session.is_finalised:
                current_app.logger.info(f"Practice session {session_id} already completed, skipping")
                return True

            stored_rows = session.words.count()
            if recorded_count == 0 and stored_rows == 0:
                db.session.delete(session)
                safe_commit(db.session)
                current_app.logger.info(f"Deleted empty practice session {session_id}")
                return True

            session.correct_answers = correct_count
            session.completed = bool(is_fully_completed)
            session.completed_at = datetime.now(timezone.utc)
            safe_commit(db.session)

            session_completed.send(
                current_app._get_current_object(),
                user_id=session.user_id,
                session_id=session.id,
                mode=session.mode,
                total_words=session.total_words,
                correct_answers=session.correct_answers,
                completed=session.completed,
            )
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error completing practice session {session_id}: {e}", exc_info=True)
            return False

    @staticmethod
    def get_session(session_id):
        return db.session.get(PracticeSession, session_id)

    @staticmethod
    def get_session_history(user_id, limit=20):
        """Most recent finalised sessions of a user, newest first."""
        return (
            PracticeSession.query
            .filter(PracticeSession.user_id == user_id, PracticeSession.completed_at.isnot(None))
            .order_by(PracticeSession.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_session_words(session_id):
        return (
            PracticeSessionWord.query
            .filter_by(session_id=session_id)
            .order_by(PracticeSessionWord.id)
            .all()
        )

    @staticmethod
    def _live_session_ids(cutoff):
        """Session ids still referenced by a snapshot saved after ``cutoff``."""
        live = set()
        for snapshot in PracticeSnapshot.query.all():
            updated_at = snapshot.updated_at
            if updated_at is None:
                continue
            if updated_at.tzinfo is None:
                updated_at = updated_at.replace(tzinfo=timezone.utc)
            if updated_at < cutoff:
                continue
            state = (snapshot.payload or {}).get('state') or {}
            if state.get('session_id') is not None:
                live.add(state['session_id'])
        return live

    @staticmethod
    def cleanup_abandoned_sessions(max_age_minutes=30):
        """
        Delete sessions that were never finalised, hold no word rows, are
        older than ``max_age_minutes`` and are no longer referenced by a fresh
        engine snapshot. Returns the number of deleted rows.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=max_age_minutes)
        try:
            has_words = (
                db.session.query(PracticeSessionWord.id)
                .filter(PracticeSessionWord.session_id == PracticeSession.id)
                .exists()
            )
            live = PracticeSessionService._live_session_ids(cutoff)
            stale = [
                session for session in (
                    PracticeSession.query
                    .filter(
                        PracticeSession.completed_at.is_(None),
                        PracticeSession.created_at < cutoff,
                        ~has_words,
                    )
                    .all()
                )
                if session.id not in live
            ]
            for session in stale:
                db.session.delete(session)
            if stale:
                safe_commit(db.session)
                current_app.logger.info(f"Removed {len(stale)} abandoned practice sessions")
            return len(stale)
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error cleaning up abandoned practice sessions: {e}", exc_info=True)
            return 0
