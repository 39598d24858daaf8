# File: lexistack_app/modules/dictionary/interface.py
"""
Dictionary Interface
====================
Public API for other modules to look words up.
"""

from .logics.entry_parser import parse_entry
from .services.lookup_client import WordLookupClient


def lookup_word(word):
    """Look a word up with the configured client. Failures surface as None."""
    return WordLookupClient().lookup_or_none(word)


__all__ = ['WordLookupClient', 'lookup_word', 'parse_entry']
