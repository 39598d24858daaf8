"""
Stats Listener
Listens to practice signals and refreshes the profile statistics.
"""
from flask import current_app

from lexistack_app.core.signals import session_completed, words_saved

from .services.progress_service import ProgressService


def init_stats_listener():
    """Register signal subscriptions."""
    session_completed.connect(on_session_completed)
    words_saved.connect(on_words_saved)


def on_session_completed(sender, **kwargs):
    """
    Handle session completion.
    Payload: user_id, session_id, mode, total_words, correct_answers, completed
    """
    user_id = kwargs.get('user_id')
    if not user_id:
        return
    if ProgressService.refresh_user_stats(user_id) is None:
        current_app.logger.warning(f"Stats not refreshed after session {kwargs.get('session_id')}")


def on_words_saved(sender, **kwargs):
    """Keep ``words_learned`` current after an explicit save. Payload: user_id, collection_id, saved_count"""
    user_id = kwargs.get('user_id')
    if user_id:
        ProgressService.refresh_user_stats(user_id)
