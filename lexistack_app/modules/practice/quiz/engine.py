# File: lexistack_app/modules/practice/quiz/engine.py
"""
Quiz Game Engine
================
One multiple-choice question per practice word. Selecting an option is a
one-shot action per question and scores at most one point; outcomes are
written on navigation and at the end of the session. Answers are keyed by
the question's ordinal within the session plus the word id, so the same
word showing up twice never collides.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..engine.base import BaseGameEngine, PHASE_ACTIVE, PHASE_EMPTY
from ..engine.selection import choose_meaning
from ..engine.snapshot import ENGINE_QUIZ
from .generators import DefinitionQuizGenerator

logger = logging.getLogger(__name__)


def answer_key(ordinal, word_id) -> str:
    return f"{ordinal}:{word_id}"


class QuizGameEngine(BaseGameEngine):
    engine_type = ENGINE_QUIZ
    mode = 'quiz'

    def __init__(self, *args, question_generator=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.question_generator = question_generator or DefinitionQuizGenerator()
        self.total_score = 0
        self._reset_session_state()

    def _reset_session_state(self) -> None:
        self.questions: List[Dict[str, Any]] = []
        self.current_index = 0
        self.selected_option: Optional[int] = None
        self.score = 0
        self.answered_questions: List[Dict[str, Any]] = []
        self.recorded_answer_keys = set()
        self.show_hint = False

    def start(self) -> bool:
        if self.lifecycle.is_active:
            self.teardown()
        self.total_score = 0
        return super().start()

    # ── Loading ─────────────────────────────────────────────────────

    def _load_batch(self) -> bool:
        try:
            words = self.word_source.fetch(self.user_id, self.capacity, self.collection_id)
        except Exception as e:
            logger.error(f"Fetching quiz words failed: {e}", exc_info=True)
            words = []

        if not words:
            self.phase = PHASE_EMPTY
            self.notify('info', 'No words to practice yet. Save some words to a collection first.')
            return False

        batch = words[:self.capacity]
        questions = []
        for word in batch:
            meaning = choose_meaning(self.rng, word)
            if meaning is None:
                continue
            try:
                generated = self.question_generator.generate(word, meaning, batch, self.rng)
            except Exception as e:
                logger.warning(f"Skipping '{word.get('word')}', no question could be generated: {e}")
                continue
            questions.append({
                'ordinal': len(questions),
                'word_id': word['word_id'],
                'meaning_id': meaning['meaning_id'],
                'collection_id': word.get('collection_id'),
                'word': word['word'],
                'question': generated['question'],
                'options': list(generated['options']),
                'correct_option_index': int(generated['correct_option_index']),
                'hint': generated.get('hint') or meaning.get('definition'),
            })

        if not questions:
            self.phase = PHASE_EMPTY
            self.notify('warning', 'Could not prepare quiz questions for your words.')
            return False

        self.questions = questions
        return self._open_tracker_session(len(questions))

    # ── Actions ─────────────────────────────────────────────────────

    @property
    def current_question(self) -> Optional[Dict[str, Any]]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    def _answer_for(self, ordinal) -> Optional[Dict[str, Any]]:
        for answered in self.answered_questions:
            if answered['ordinal'] == ordinal:
                return answered
        return None

    def select_option(self, option_index: int) -> Optional[bool]:
        """
        Answer the current question. Returns whether the answer was correct,
        or None when the selection was ignored (no active session, invalid
        option or question already answered).
        """
        question = self.current_question
        if not self.lifecycle.is_active or question is None:
            return None
        if not 0 <= option_index < len(question['options']):
            return None
        if self.selected_option is not None or self._answer_for(question['ordinal']) is not None:
            return None

        is_correct = option_index == question['correct_option_index']
        self.selected_option = option_index
        if is_correct:
            self.score += 1
        self.answered_questions.append({
            'ordinal': question['ordinal'],
            'word_id': question['word_id'],
            'collection_id': question['collection_id'],
            'meaning_id': question['meaning_id'],
            'selected_option': option_index,
            'is_correct': is_correct,
        })
        self.persist()
        return is_correct

    def next(self) -> bool:
        """Record the current answer, then move on; a no-op move on the last question."""
        question = self.current_question
        if not self.lifecycle.is_active or question is None:
            return False

        answered = self._answer_for(question['ordinal'])
        if answered is not None:
            self._record(answered)

        if self.current_index >= len(self.questions) - 1:
            self.persist()
            return False
        self._move_to(self.current_index + 1)
        return True

    def previous(self) -> bool:
        if not self.lifecycle.is_active or self.current_index <= 0:
            return False
        self._move_to(self.current_index - 1)
        return True

    def _move_to(self, index) -> None:
        self.current_index = index
        self.selected_option = self._restore_selection(self.questions[index])
        self.show_hint = False
        self.persist()

    def _restore_selection(self, question) -> Optional[int]:
        """The option chosen earlier for ``question``: by ordinal, else by word id."""
        answered = self._answer_for(question['ordinal'])
        if answered is None:
            for candidate in reversed(self.answered_questions):
                if candidate['word_id'] == question['word_id']:
                    answered = candidate
                    break
        return answered['selected_option'] if answered else None

    def toggle_hint(self) -> bool:
        if not self.lifecycle.is_active or self.current_question is None:
            return False
        self.show_hint = not self.show_hint
        self.persist()
        return self.show_hint

    def finish(self) -> Optional[Dict[str, Any]]:
        if not self.lifecycle.is_active:
            return None
        self._close_out(True)
        return self.summary(completed=True)

    def back(self) -> bool:
        """Leave early. Returns True when a completion acknowledgment should be shown."""
        if not self.lifecycle.is_active:
            self.discard_snapshot()
            return False
        show_acknowledgment = bool(self.answered_questions)
        self._close_out(False)
        return show_acknowledgment

    # ── Recording ───────────────────────────────────────────────────

    def _record(self, answered) -> bool:
        key = answer_key(answered['ordinal'], answered['word_id'])
        if key in self.recorded_answer_keys:
            return True
        try:
            ok = self.tracker.record(
                self.session_id,
                answered['word_id'],
                answered['meaning_id'],
                answered['collection_id'],
                answered['is_correct'],
            )
        except Exception as e:
            logger.error(f"Recording answer {key} failed: {e}", exc_info=True)
            ok = False
        if ok:
            self.recorded_answer_keys.add(key)
        else:
            self.notify('warning', 'Could not save the answer. It will be retried when the session ends.')
        return ok

    def _sweep(self) -> int:
        for answered in self.answered_questions:
            self._record(answered)
        self.total_score += self.score
        return sum(
            1 for answered in self.answered_questions
            if answered['is_correct']
            and answer_key(answered['ordinal'], answered['word_id']) in self.recorded_answer_keys
        )

    def _recorded_count(self) -> int:
        return len(self.recorded_answer_keys)

    # ── Persistence ─────────────────────────────────────────────────

    def _state_to_dict(self) -> Dict[str, Any]:
        return {
            'questions': self.questions,
            'current_index': self.current_index,
            'selected_option': self.selected_option,
            'score': self.score,
            'total_score': self.total_score,
            'answered_questions': self.answered_questions,
            'recorded_answer_keys': sorted(self.recorded_answer_keys),
            'show_hint': self.show_hint,
        }

    def _state_from_dict(self, state: Dict[str, Any]) -> None:
        questions = state['questions']
        if not isinstance(questions, list):
            raise TypeError('questions must be a list')
        self.questions = questions
        self.current_index = int(state['current_index'])
        selected = state['selected_option']
        self.selected_option = int(selected) if selected is not None else None
        self.score = int(state['score'])
        self.total_score = int(state['total_score'])
        self.answered_questions = list(state['answered_questions'])
        self.recorded_answer_keys = set(state['recorded_answer_keys'])
        self.show_hint = bool(state['show_hint'])

    # ── Presentation ────────────────────────────────────────────────

    def summary(self, completed: bool) -> Dict[str, Any]:
        return {
            'session_id': self.session_id,
            'session_count': self.session_count,
            'score': self.score,
            'total_questions': len(self.questions),
            'total_score': self.total_score,
            'answered': len(self.answered_questions),
            'completed': completed,
        }

    def to_view(self) -> Dict[str, Any]:
        view = self.base_view()
        question = self.current_question if self.phase == PHASE_ACTIVE else None
        if question is not None:
            answered = self.selected_option is not None
            question = {
                'ordinal': question['ordinal'],
                'question': question['question'],
                'options': question['options'],
                'hint': question['hint'] if self.show_hint else None,
                # Revealed once answered so the client can mark the options
                'correct_option_index': question['correct_option_index'] if answered else None,
            }
        view.update({
            'current_index': self.current_index,
            'total_questions': len(self.questions),
            'is_last': bool(self.questions) and self.current_index == len(self.questions) - 1,
            'question': question,
            'selected_option': self.selected_option,
            'show_hint': self.show_hint,
            'score': self.score,
            'total_score': self.total_score,
        })
        return view
