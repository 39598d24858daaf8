from .engine import QuizGameEngine, answer_key
from .generators import AIQuizGenerator, DefinitionQuizGenerator, QuestionGenerationError

__all__ = [
    'QuizGameEngine',
    'answer_key',
    'AIQuizGenerator',
    'DefinitionQuizGenerator',
    'QuestionGenerationError',
]
