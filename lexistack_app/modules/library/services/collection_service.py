# File: lexistack_app/modules/library/services/collection_service.py
"""
Collection Store
================
CRUD over user collections and word/definition records.

Consistency rules:
- a user has at most one collection per exact name,
- a word text exists once store-wide,
- meanings of a word are created once and never appended to,
- a (collection, word, meaning, user) entry exists once,
- the user's global word list drops a word only after its last collection
  entry is gone.

Failures are reported as ``False``/``None``/``[]``; nothing raises into
the caller.
"""

from flask import current_app
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func

from lexistack_app.core.signals import words_saved
from lexistack_app.models import (
    db,
    Collection,
    CollectionWord,
    PracticeSessionWord,
    UserWord,
    Word,
    WordMeaning,
)
from lexistack_app.modules.shared.utils.db_session import insert_or_fetch, safe_commit
from lexistack_app.schemas import WordDefinition

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


class CollectionStore:
    """Static service for collections and the words they hold."""

    # --- Collections ---

    @staticmethod
    def get_or_create_collection(user_id, name, description=None):
        """Return the user's collection called ``name``, creating it on first use."""
        try:
            collection, created = insert_or_fetch(
                db.session,
                Collection,
                {'user_id': user_id, 'name': name},
                defaults={'description': description, 'word_count': 0},
            )
            if created:
                current_app.logger.info(f"Created collection '{name}' for user {user_id}")
            return collection
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error getting or creating collection '{name}': {e}", exc_info=True)
            return None

    @staticmethod
    def create_collection(user_id, name, description=None):
        """Create a new collection. Returns None if the name is already taken."""
        try:
            collection, created = insert_or_fetch(
                db.session,
                Collection,
                {'user_id': user_id, 'name': name},
                defaults={'description': description, 'word_count': 0},
            )
            return collection if created else None
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error creating collection '{name}': {e}", exc_info=True)
            return None

    @staticmethod
    def get_user_collections(user_id):
        try:
            return (
                Collection.query
                .filter_by(user_id=user_id)
                .order_by(Collection.created_at.desc())
                .all()
            )
        except Exception as e:
            current_app.logger.error(f"Error fetching collections for user {user_id}: {e}")
            return []

    @staticmethod
    def get_owned_collection(collection_id, user_id):
        collection = db.session.get(Collection, collection_id)
        if collection is None or collection.user_id != user_id:
            return None
        return collection

    @staticmethod
    def get_collection_words(collection_id, user_id):
        try:
            if CollectionStore.get_owned_collection(collection_id, user_id) is None:
                return []
            return (
                CollectionWord.query
                .filter_by(collection_id=collection_id, user_id=user_id)
                .order_by(CollectionWord.created_at.desc(), CollectionWord.id.desc())
                .all()
            )
        except Exception as e:
            current_app.logger.error(f"Error fetching words of collection {collection_id}: {e}")
            return []

    # --- Words ---

    @staticmethod
    def add_word_to_collection(user_id, word_def, collection_id):
        """
        Add a looked-up word with its meanings to a collection.

        The word row and its meanings are shared store-wide; a word that
        already has meanings keeps them as they are. Each meaning gets its own
        collection entry; a failing meaning is logged and skipped.
        """
        try:
            if isinstance(word_def, dict):
                word_def = WordDefinition.model_validate(word_def)

            if CollectionStore.get_owned_collection(collection_id, user_id) is None:
                current_app.logger.warning(
                    f"Collection {collection_id} not found for user {user_id}, word '{word_def.word}' not added"
                )
                return False

            pronunciation = word_def.pronunciation
            word, _ = insert_or_fetch(
                db.session,
                Word,
                {'text': word_def.word},
                defaults={
                    'phonetic': pronunciation.text if pronunciation else None,
                    'audio_url': pronunciation.audio if pronunciation else None,
                    'stems': list(word_def.stems),
                },
            )

            if not word.meanings:
                CollectionStore._create_meanings(word, word_def)

            meanings = WordMeaning.query.filter_by(word_id=word.id).order_by(WordMeaning.ordinal_index).all()
            if not meanings:
                current_app.logger.warning(f"Word '{word.text}' has no meanings, nothing to add to collection")
                return False

            for meaning in meanings:
                try:
                    insert_or_fetch(
                        db.session,
                        CollectionWord,
                        {
                            'collection_id': collection_id,
                            'word_id': word.id,
                            'meaning_id': meaning.id,
                            'user_id': user_id,
                        },
                        defaults={'status': CollectionWord.STATUS_NEW, 'review_count': 0},
                    )
                except Exception as e:
                    db.session.rollback()
                    current_app.logger.error(
                        f"Error adding meaning {meaning.id} of '{word.text}' to collection {collection_id}: {e}"
                    )

            insert_or_fetch(db.session, UserWord, {'user_id': user_id, 'word_id': word.id})
            CollectionStore._refresh_word_count(collection_id)
            safe_commit(db.session)
            return True
        except PydanticValidationError as e:
            current_app.logger.warning(f"Rejected malformed word definition for collection {collection_id}: {e}")
            return False
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error adding word '{word_def.word}' to collection {collection_id}: {e}", exc_info=True)
            return False

    @staticmethod
    def _create_meanings(word, word_def):
        for index, entry in enumerate(word_def.definitions):
            try:
                insert_or_fetch(
                    db.session,
                    WordMeaning,
                    {'word_id': word.id, 'ordinal_index': index},
                    defaults={
                        'part_of_speech': word_def.part_of_speech,
                        'definition': entry.meaning,
                        'examples': list(entry.examples),
                    },
                )
            except Exception as e:
                db.session.rollback()
                current_app.logger.error(f"Error creating meaning {index} for word '{word.text}': {e}")

    @staticmethod
    def _refresh_word_count(collection_id):
        collection = db.session.get(Collection, collection_id)
        if collection is None:
            return
        collection.word_count = (
            db.session.query(func.count(func.distinct(CollectionWord.word_id)))
            .filter(CollectionWord.collection_id == collection_id)
            .scalar()
        ) or 0

    @staticmethod
    def remove_word_from_collection(collection_id, word_id, user_id):
        """
        Remove a word (every meaning) from a collection together with the
        practice rows recorded through that collection.
        """
        try:
            if CollectionStore.get_owned_collection(collection_id, user_id) is None:
                return False

            removed = (
                CollectionWord.query
                .filter_by(collection_id=collection_id, word_id=word_id, user_id=user_id)
                .delete(synchronize_session=False)
            )
            if not removed:
                return False

            PracticeSessionWord.query.filter_by(
                collection_id=collection_id, word_id=word_id, user_id=user_id
            ).delete(synchronize_session=False)

            # Must run after the entry delete above, or the removed row counts as a reference
            still_referenced = (
                CollectionWord.query
                .filter_by(user_id=user_id, word_id=word_id)
                .count()
            )
            if not still_referenced:
                UserWord.query.filter_by(user_id=user_id, word_id=word_id).delete(synchronize_session=False)

            CollectionStore._refresh_word_count(collection_id)
            safe_commit(db.session)
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(
                f"Error removing word {word_id} from collection {collection_id}: {e}", exc_info=True
            )
            return False

    @staticmethod
    def save_words(user_id, collection_name, word_defs, description=None):
        """Save a list of definitions into the named collection. Returns how many were saved."""
        collection = CollectionStore.get_or_create_collection(user_id, collection_name, description)
        if collection is None:
            return 0

        saved = 0
        for word_def in word_defs:
            if CollectionStore.add_word_to_collection(user_id, word_def, collection.id):
                saved += 1

        if saved:
            words_saved.send(
                current_app._get_current_object(),
                user_id=user_id,
                collection_id=collection.id,
                saved_count=saved,
            )
        return saved

    @staticmethod
    def update_word_status(collection_id, word_id, user_id, status):
        """Set the practice status of every entry of a word in one collection."""
        if status not in CollectionWord.STATUSES:
            return False
        try:
            entries = CollectionWord.query.filter_by(
                collection_id=collection_id, word_id=word_id, user_id=user_id
            ).all()
            if not entries:
                return False
            for entry in entries:
                entry.status = status
            safe_commit(db.session)
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating status of word {word_id}: {e}", exc_info=True)
            return False

    @staticmethod
    def get_user_words(user_id):
        """The user's global word list, newest first."""
        try:
            return (
                UserWord.query
                .filter_by(user_id=user_id)
                .order_by(UserWord.created_at.desc(), UserWord.id.desc())
                .all()
            )
        except Exception as e:
            current_app.logger.error(f"Error fetching word list for user {user_id}: {e}")
            return []

    @staticmethod
    def search_words(query):
        """
        Search words by text first; only when nothing matches, search the
        definitions and group the hits by word.
        """
        query = (query or '').strip()
        if len(query) < SEARCH_MIN_LENGTH:
            return []

        pattern = f"%{query}%"
        try:
            direct = (
                Word.query
                .filter(Word.text.ilike(pattern))
                .order_by(Word.text)
                .limit(SEARCH_LIMIT)
                .all()
            )
            if direct:
                return [word.to_dict(include_meanings=True) for word in direct]

            hits = (
                WordMeaning.query
                .filter(WordMeaning.definition.ilike(pattern))
                .order_by(WordMeaning.word_id, WordMeaning.ordinal_index)
                .limit(SEARCH_LIMIT)
                .all()
            )
            grouped = {}
            for meaning in hits:
                entry = grouped.get(meaning.word_id)
                if entry is None:
                    entry = meaning.word.to_dict()
                    entry['meanings'] = []
                    grouped[meaning.word_id] = entry
                entry['meanings'].append(meaning.to_dict())
            return list(grouped.values())
        except Exception as e:
            current_app.logger.error(f"Error searching words for '{query}': {e}")
            return []
