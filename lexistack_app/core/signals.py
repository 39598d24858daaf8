"""
Central Signal Registry.

Uses blinker so modules can react to practice and library events without
importing each other.

Usage:
    # Publisher
    from lexistack_app.core.signals import session_completed
    session_completed.send(None, user_id=1, session_id=2, ...)

    # Subscriber
    @session_completed.connect
    def on_session_completed(sender, **kwargs):
        ...
"""
from blinker import Namespace

practice_signals = Namespace()

# Fired after a practice session row has been finalised (not when it was deleted as empty)
# Payload: user_id, session_id, mode, total_words, correct_answers, completed
session_completed = practice_signals.signal('session_completed')

library_signals = Namespace()

# Fired after an explicit save of looked-up words into a collection
# Payload: user_id, collection_id, saved_count
words_saved = library_signals.signal('words_saved')
