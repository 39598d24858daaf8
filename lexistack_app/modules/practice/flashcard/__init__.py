from .engine import FlashcardGameEngine, card_key

__all__ = ['FlashcardGameEngine', 'card_key']
