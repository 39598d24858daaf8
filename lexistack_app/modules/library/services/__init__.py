from .collection_service import CollectionStore
from .practice_words import PracticeWordSource

__all__ = ['CollectionStore', 'PracticeWordSource']
