# File: lexistack_app/modules/dictionary/services/lookup_client.py
from urllib.parse import quote

import requests
from flask import current_app

from lexistack_app.core.error_handlers import ConfigurationError, DictionaryLookupError

from ..logics.entry_parser import parse_entry


class WordLookupClient:
    """
    Thin wrapper around the Learner's Dictionary JSON API.

    ``lookup`` returns a ``WordDefinition`` or None when the dictionary has
    no entry. A missing API key raises ``ConfigurationError``; transport or
    HTTP failures raise ``DictionaryLookupError``.
    """

    def __init__(self, api_key=None, base_url=None, timeout=None, session=None):
        config = current_app.config
        self.api_key = api_key if api_key is not None else config.get('DICTIONARY_API_KEY')
        self.base_url = (base_url or config.get('DICTIONARY_API_URL')).rstrip('/')
        self.timeout = timeout or config.get('DICTIONARY_TIMEOUT', 10)
        self.session = session or requests

    def lookup(self, word):
        word = (word or '').strip()
        if not word:
            return None
        if not self.api_key:
            raise ConfigurationError('Dictionary API key is not configured', setting='DICTIONARY_API_KEY')

        url = f"{self.base_url}/{quote(word)}"
        try:
            response = self.session.get(url, params={'key': self.api_key}, timeout=self.timeout)
        except requests.RequestException as e:
            current_app.logger.warning(f"Dictionary request for '{word}' failed: {e}")
            raise DictionaryLookupError(f"Dictionary request for '{word}' failed") from e

        if not response.ok:
            current_app.logger.warning(f"Dictionary API returned {response.status_code} for '{word}'")
            raise DictionaryLookupError(f"Dictionary API returned {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise DictionaryLookupError('Dictionary API returned invalid JSON') from e

        return parse_entry(data)

    def lookup_or_none(self, word):
        """Like ``lookup`` but a failed lookup means "no definition"."""
        try:
            return self.lookup(word)
        except DictionaryLookupError:
            return None
