# File: lexistack_app/modules/session/interface.py
"""
Session Interface
=================
Public API for other modules to record practice outcomes.
The game engines receive a ``PracticeSessionTracker`` through their
constructor and only ever talk to it.
"""

from typing import List, Optional

from .services.session_service import PracticeSessionService


class PracticeSessionTracker:
    """Durable, idempotent recording of word-level practice outcomes."""

    def start(self, user_id: int, mode: str, total_words: int) -> Optional[int]:
        """
        Create a practice session.

        Returns:
            The new session id, or None when the row could not be created.
        """
        return PracticeSessionService.create_session(user_id, mode, total_words)

    def record(
        self,
        session_id: int,
        word_id: int,
        meaning_id: Optional[int],
        collection_id: Optional[int],
        is_correct: bool,
    ) -> bool:
        """Insert one outcome row. An already existing row counts as success."""
        return PracticeSessionService.record_word(
            session_id, word_id, meaning_id, collection_id, is_correct
        )

    def complete(
        self,
        session_id: int,
        correct_count: int,
        is_fully_completed: bool,
        recorded_count: int,
    ) -> bool:
        """Finalise the session, or delete it when nothing was recorded."""
        return PracticeSessionService.complete_session(
            session_id, correct_count, is_fully_completed, recorded_count
        )

    @staticmethod
    def get_session(session_id: int):
        return PracticeSessionService.get_session(session_id)

    @staticmethod
    def get_session_history(user_id: int, limit: int = 20) -> List:
        return PracticeSessionService.get_session_history(user_id, limit)

    @staticmethod
    def get_session_words(session_id: int) -> List:
        return PracticeSessionService.get_session_words(session_id)

    @staticmethod
    def cleanup_abandoned_sessions(max_age_minutes: int = 30) -> int:
        return PracticeSessionService.cleanup_abandoned_sessions(max_age_minutes)
