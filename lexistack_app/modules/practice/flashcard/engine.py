# File: lexistack_app/modules/practice/flashcard/engine.py
"""
Flashcard Game Engine
=====================
A session shows up to ``capacity`` cards. Each card starts on a random face
(definition or word). The first flip of a card counts the word as practiced
and records it exactly once; flipping again never records.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..engine.base import BaseGameEngine, PHASE_ACTIVE, PHASE_EMPTY
from ..engine.selection import choose_example, choose_initial_side, choose_meaning
from ..engine.snapshot import ENGINE_FLASHCARD

logger = logging.getLogger(__name__)


def card_key(word_id, meaning_id) -> str:
    return f"{word_id}:{meaning_id}"


class FlashcardGameEngine(BaseGameEngine):
    engine_type = ENGINE_FLASHCARD
    mode = 'flashcard'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._reset_session_state()

    def _reset_session_state(self) -> None:
        self.cards: List[Dict[str, Any]] = []
        self.current_index = 0
        self.is_flipped = False
        self.card_flipped_once = False
        self.practiced_words: List[str] = []
        self.recorded_word_keys = set()

    # ── Loading ─────────────────────────────────────────────────────

    def _load_batch(self) -> bool:
        try:
            words = self.word_source.fetch(self.user_id, self.capacity, self.collection_id)
        except Exception as e:
            logger.error(f"Fetching flashcard words failed: {e}", exc_info=True)
            words = []

        cards = [card for card in (self._build_card(word) for word in words[:self.capacity]) if card]
        if not cards:
            self.phase = PHASE_EMPTY
            self.notify('info', 'No words to practice yet. Save some words to a collection first.')
            return False

        self.cards = cards
        return self._open_tracker_session(len(cards))

    def _build_card(self, word) -> Optional[Dict[str, Any]]:
        meaning = choose_meaning(self.rng, word)
        if meaning is None:
            return None
        return {
            'key': card_key(word['word_id'], meaning['meaning_id']),
            'word_id': word['word_id'],
            'meaning_id': meaning['meaning_id'],
            'collection_id': word.get('collection_id'),
            'word': word['word'],
            'phonetic': word.get('phonetic'),
            'audio_url': word.get('audio_url'),
            'part_of_speech': meaning.get('part_of_speech'),
            'definition': meaning['definition'],
            'example': choose_example(self.rng, meaning),
            'initial_side': choose_initial_side(self.rng),
        }

    # ── Actions ─────────────────────────────────────────────────────

    @property
    def current_card(self) -> Optional[Dict[str, Any]]:
        if 0 <= self.current_index < len(self.cards):
            return self.cards[self.current_index]
        return None

    def flip(self) -> bool:
        """Toggle the current card. Returns False when no session is active."""
        card = self.current_card
        if not self.lifecycle.is_active or card is None:
            return False

        self.is_flipped = not self.is_flipped
        if not self.card_flipped_once:
            self.card_flipped_once = True
            if card['key'] not in self.practiced_words:
                self.practiced_words.append(card['key'])
            self._record(card)

        self.persist()
        return True

    def next(self) -> bool:
        """Advance to the next card; a no-op on the last card."""
        if not self.lifecycle.is_active or self.current_index >= len(self.cards) - 1:
            return False
        self.current_index += 1
        self.is_flipped = False
        self.card_flipped_once = False
        self.persist()
        return True

    def finish(self) -> Optional[Dict[str, Any]]:
        """End the session as fully completed and return its summary."""
        if not self.lifecycle.is_active:
            return None
        self._close_out(True)
        return self.summary(completed=True)

    def back(self) -> bool:
        """
        Leave early. Returns True when a completion acknowledgment should be
        shown, which is the case once any card was flipped.
        """
        if not self.lifecycle.is_active:
            self.discard_snapshot()
            return False
        show_acknowledgment = bool(self.practiced_words)
        self._close_out(False)
        return show_acknowledgment

    # ── Recording ───────────────────────────────────────────────────

    def _record(self, card) -> bool:
        if card['key'] in self.recorded_word_keys:
            return True
        try:
            ok = self.tracker.record(
                self.session_id, card['word_id'], card['meaning_id'], card['collection_id'], True
            )
        except Exception as e:
            logger.error(f"Recording card {card['key']} failed: {e}", exc_info=True)
            ok = False
        if ok:
            self.recorded_word_keys.add(card['key'])
        else:
            self.notify('warning', f"Could not save progress for '{card['word']}'.")
        return ok

    def _sweep(self) -> int:
        cards_by_key = {card['key']: card for card in self.cards}
        for key in self.practiced_words:
            card = cards_by_key.get(key)
            if card is not None and key not in self.recorded_word_keys:
                self._record(card)
        return len(self.recorded_word_keys)

    def _recorded_count(self) -> int:
        return len(self.recorded_word_keys)

    # ── Persistence ─────────────────────────────────────────────────

    def _state_to_dict(self) -> Dict[str, Any]:
        return {
            'cards': self.cards,
            'current_index': self.current_index,
            'is_flipped': self.is_flipped,
            'card_flipped_once': self.card_flipped_once,
            'practiced_words': list(self.practiced_words),
            'recorded_word_keys': sorted(self.recorded_word_keys),
        }

    def _state_from_dict(self, state: Dict[str, Any]) -> None:
        cards = state['cards']
        if not isinstance(cards, list):
            raise TypeError('cards must be a list')
        self.cards = cards
        self.current_index = int(state['current_index'])
        self.is_flipped = bool(state['is_flipped'])
        self.card_flipped_once = bool(state['card_flipped_once'])
        self.practiced_words = list(state['practiced_words'])
        self.recorded_word_keys = set(state['recorded_word_keys'])

    # ── Presentation ────────────────────────────────────────────────

    def summary(self, completed: bool) -> Dict[str, Any]:
        return {
            'session_id': self.session_id,
            'session_count': self.session_count,
            'total_cards': len(self.cards),
            'words_practiced': len(self.practiced_words),
            'words_recorded': len(self.recorded_word_keys),
            'completed': completed,
        }

    def to_view(self) -> Dict[str, Any]:
        view = self.base_view()
        view.update({
            'current_index': self.current_index,
            'total_cards': len(self.cards),
            'is_flipped': self.is_flipped,
            'is_last': bool(self.cards) and self.current_index == len(self.cards) - 1,
            'card': self.current_card if self.phase == PHASE_ACTIVE else None,
            'practiced_count': len(self.practiced_words),
            'recorded_count': len(self.recorded_word_keys),
        })
        return view
