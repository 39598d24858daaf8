from .lookup_client import WordLookupClient

__all__ = ['WordLookupClient']
