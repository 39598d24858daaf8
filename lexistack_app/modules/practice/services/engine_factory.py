# File: lexistack_app/modules/practice/services/engine_factory.py
"""Wire the game engines to their production collaborators for one request."""

from flask import current_app

from lexistack_app.core.error_handlers import ConfigurationError
from lexistack_app.modules.library.interface import PracticeWordSource
from lexistack_app.modules.session.interface import PracticeSessionTracker

from ..engine.snapshot_store import SnapshotStore
from ..flashcard.engine import FlashcardGameEngine
from ..quiz.engine import QuizGameEngine
from ..quiz.generators import AIQuizGenerator, DefinitionQuizGenerator


def _engine_kwargs(user_id, collection_id, rng):
    config = current_app.config
    return dict(
        user_id=user_id,
        tracker=PracticeSessionTracker(),
        word_source=PracticeWordSource(),
        snapshot_store=SnapshotStore(user_id),
        rng=rng,
        capacity=config.get('PRACTICE_SESSION_CAPACITY', 5),
        timeout_minutes=config.get('PRACTICE_SNAPSHOT_TIMEOUT_MINUTES', 30),
        collection_id=collection_id,
    )


def build_question_generator():
    """The configured quiz question source: ``local`` (default) or ``ai``."""
    source = current_app.config.get('QUIZ_QUESTION_SOURCE', 'local')
    if source == 'ai':
        from lexistack_app.modules.ai_services.interface import get_extraction_client

        try:
            return AIQuizGenerator(get_extraction_client())
        except ConfigurationError:
            current_app.logger.warning("QUIZ_QUESTION_SOURCE is 'ai' but Gemini is not configured, using local questions")
    return DefinitionQuizGenerator()


def build_flashcard_engine(user_id, collection_id=None, rng=None):
    return FlashcardGameEngine(**_engine_kwargs(user_id, collection_id, rng))


def build_quiz_engine(user_id, collection_id=None, rng=None):
    return QuizGameEngine(question_generator=build_question_generator(), **_engine_kwargs(user_id, collection_id, rng))
