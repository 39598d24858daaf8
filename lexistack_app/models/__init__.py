"""Database models package for LexiStack."""

from ..db_instance import db

from .user import User
from .vocabulary import Collection, CollectionWord, UserWord, Word, WordMeaning
from .practice import PracticeSession, PracticeSessionWord, PracticeSnapshot

__all__ = [
    'db',
    'User',
    'Word',
    'WordMeaning',
    'Collection',
    'CollectionWord',
    'UserWord',
    'PracticeSession',
    'PracticeSessionWord',
    'PracticeSnapshot',
]
