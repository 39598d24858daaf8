# File: lexistack_app/modules/library/services/practice_words.py
"""Selection of practice-eligible words for the game engines."""

from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy import case

from lexistack_app.models import CollectionWord


class PracticeWordSource:
    """
    Bounded batch of distinct words to practice, each with every candidate
    meaning. Choosing the meaning is left to the caller.

    Words that are new or still being learned come before known ones, and
    within a status the least recently reviewed come first.
    """

    def fetch(self, user_id: int, limit: int, collection_id: Optional[int] = None) -> List[Dict]:
        try:
            status_rank = case(
                (CollectionWord.status == CollectionWord.STATUS_KNOWN, 1),
                else_=0,
            )
            query = CollectionWord.query.filter_by(user_id=user_id)
            if collection_id is not None:
                query = query.filter_by(collection_id=collection_id)
            entries = query.order_by(
                status_rank,
                CollectionWord.last_reviewed_at.is_(None).desc(),
                CollectionWord.last_reviewed_at.asc(),
                CollectionWord.id.asc(),
            ).all()
        except Exception as e:
            current_app.logger.error(f"Error fetching practice words for user {user_id}: {e}", exc_info=True)
            return []

        batch: Dict[int, Dict] = {}
        for entry in entries:
            item = batch.get(entry.word_id)
            if item is None:
                if len(batch) >= limit:
                    continue
                word = entry.word
                item = {
                    'word_id': word.id,
                    'word': word.text,
                    'phonetic': word.phonetic,
                    'audio_url': word.audio_url,
                    'collection_id': entry.collection_id,
                    'meanings': [],
                }
                batch[entry.word_id] = item
            elif entry.collection_id != item['collection_id']:
                # One collection per word keeps outcome rows attributable
                continue

            meaning = entry.meaning
            if any(m['meaning_id'] == meaning.id for m in item['meanings']):
                continue
            item['meanings'].append({
                'meaning_id': meaning.id,
                'part_of_speech': meaning.part_of_speech,
                'definition': meaning.definition,
                'examples': list(meaning.examples or []),
            })

        return [item for item in batch.values() if item['meanings']]
