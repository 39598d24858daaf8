from .engine_factory import build_flashcard_engine, build_quiz_engine, build_question_generator

__all__ = ['build_flashcard_engine', 'build_quiz_engine', 'build_question_generator']
