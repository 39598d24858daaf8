# File: lexistack_app/modules/library/interface.py
"""
Library Interface
=================
Public API for other modules: collection storage and the practice word source.
"""

from .services.collection_service import CollectionStore
from .services.practice_words import PracticeWordSource

__all__ = ['CollectionStore', 'PracticeWordSource']
