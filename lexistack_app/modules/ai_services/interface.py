# File: lexistack_app/modules/ai_services/interface.py
"""
AI Services Interface
=====================
Public API for other modules to reach the generative service.
"""

from .gemini_client import VocabularyExtractionClient
from .response_parser import ResponseParser


def get_extraction_client():
    """Build a client from the app config. Raises ConfigurationError without an API key."""
    return VocabularyExtractionClient()


__all__ = ['VocabularyExtractionClient', 'ResponseParser', 'get_extraction_client']
