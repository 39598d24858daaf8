# File: lexistack_app/modules/vocabulary/services/acquisition_service.py
import logging

from lexistack_app.core.error_handlers import DictionaryLookupError
from lexistack_app.modules.library.interface import CollectionStore

logger = logging.getLogger(__name__)


class VocabularyAcquisitionService:
    """
    Orchestrates extraction -> dictionary lookup -> explicit save.

    Words the dictionary does not know (or cannot be asked about right now)
    are reported back as ``skipped`` instead of failing the whole request.
    """

    def __init__(self, extraction_client, lookup_client):
        self.extraction_client = extraction_client
        self.lookup_client = lookup_client

    def _define(self, words):
        definitions, skipped = [], []
        for word in words:
            try:
                definition = self.lookup_client.lookup(word)
            except DictionaryLookupError as e:
                logger.warning(f"Lookup of '{word}' failed: {e.message}")
                definition = None
            if definition is None or not definition.definitions:
                skipped.append(word)
                continue
            definitions.append(definition)
        return definitions, skipped

    def analyze(self, text, files=None):
        result = self.extraction_client.analyze_text(text, files)
        definitions, skipped = self._define(result.vocabulary)
        return {
            'definitions': [d.model_dump() for d in definitions],
            'skipped': skipped,
            'topics': result.topics,
            'content': result.content,
        }

    def generate_topic(self, topic, tuning_options=None):
        result = self.extraction_client.generate_topic_vocabulary(topic, tuning_options)
        definitions, skipped = self._define(result.vocabulary)
        return {
            'definitions': [d.model_dump() for d in definitions],
            'skipped': skipped,
            'topics': result.topics,
            'topic_name': result.topic_name,
        }

    @staticmethod
    def save(user_id, collection_name, definitions, description=None):
        """Explicit save of looked-up definitions. Returns how many words were saved."""
        return CollectionStore.save_words(user_id, collection_name, definitions, description=description)
