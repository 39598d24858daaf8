# File: lexistack_app/modules/practice/engine/base.py
"""
Base Game Engine
================
Shared machinery of the practice games.

Design principles
-----------------
* **Injected collaborators**: the tracker, the word source, the snapshot
  store, the random policy and the clock all come in through the
  constructor, so tests run the engines against in-memory fakes.
* **One instance per request**: the routes rebuild an engine, ``resume()``
  it from its snapshot, call one operation and let it persist again.
* **Framework-agnostic**: no Flask imports; failures from collaborators
  become notices, never exceptions.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from .lifecycle import SessionLifecycle
from .snapshot import SessionSnapshot, now_ms

logger = logging.getLogger(__name__)

PHASE_IDLE = 'idle'
PHASE_ACTIVE = 'active'
PHASE_EMPTY = 'empty'
PHASE_ERROR = 'error'
PHASE_CLOSED = 'closed'

DEFAULT_CAPACITY = 5
DEFAULT_TIMEOUT_MINUTES = 30


class BaseGameEngine(ABC):
    """Common lifecycle, persistence and notice handling for the game engines."""

    engine_type: str = ''
    mode: str = ''

    def __init__(
        self,
        user_id: int,
        tracker,
        word_source,
        snapshot_store,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
        capacity: int = DEFAULT_CAPACITY,
        timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES,
        collection_id: Optional[int] = None,
    ):
        self.user_id = user_id
        self.tracker = tracker
        self.word_source = word_source
        self.snapshot_store = snapshot_store
        self.rng = rng or random.Random()
        self.clock = clock or now_ms
        self.capacity = capacity
        self.timeout_ms = timeout_minutes * 60 * 1000
        self.collection_id = collection_id

        self.session_id: Optional[int] = None
        self.session_count = 1
        self.phase = PHASE_IDLE
        self.lifecycle = SessionLifecycle()
        self.notices: List[Dict[str, str]] = []

    # ── Hooks for concrete engines ───────────────────────────────────

    @abstractmethod
    def _load_batch(self) -> bool:
        """Fetch words, build the items, start a tracker session."""

    @abstractmethod
    def _reset_session_state(self) -> None:
        """Clear everything that belongs to a single session."""

    @abstractmethod
    def _sweep(self) -> int:
        """Record every pending outcome; return the correct count to report."""

    @abstractmethod
    def _recorded_count(self) -> int:
        pass

    @abstractmethod
    def _state_to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def _state_from_dict(self, state: Dict[str, Any]) -> None:
        pass

    # ── Notices ─────────────────────────────────────────────────────

    def notify(self, level: str, message: str) -> None:
        self.notices.append({'level': level, 'message': message})

    # ── Loading ─────────────────────────────────────────────────────

    def start(self) -> bool:
        """Start a fresh session, abandoning any session still in progress."""
        if self.lifecycle.is_active:
            self.teardown()
        self.session_count = 1
        self.lifecycle.reset()
        return self._begin()

    def _begin(self) -> bool:
        self._reset_session_state()
        self.session_id = None
        if not self._load_batch():
            self.discard_snapshot()
            return False
        self.lifecycle.activate()
        self.phase = PHASE_ACTIVE
        self.persist()
        return True

    def _open_tracker_session(self, total_words: int) -> bool:
        try:
            session_id = self.tracker.start(self.user_id, self.mode, total_words)
        except Exception as e:
            logger.error(f"Starting a {self.mode} session failed: {e}", exc_info=True)
            session_id = None
        if session_id is None:
            self.phase = PHASE_ERROR
            self.notify('error', 'Could not start a practice session. Please try again.')
            return False
        self.session_id = session_id
        return True

    # ── Completion ──────────────────────────────────────────────────

    def _complete(self, is_fully_completed: bool) -> bool:
        """Run the completion sweep and close the tracker session, at most once."""
        if not self.lifecycle.begin_completion():
            return False

        correct_count = self._sweep()
        recorded = self._recorded_count()
        try:
            ok = self.tracker.complete(self.session_id, correct_count, is_fully_completed, recorded)
        except Exception as e:
            logger.error(f"Completing session {self.session_id} failed: {e}", exc_info=True)
            ok = False
        if not ok:
            self.notify('error', 'Could not save the session result.')

        self.lifecycle.close()
        self.phase = PHASE_CLOSED
        return True

    def _close_out(self, is_fully_completed: bool) -> bool:
        completed = self._complete(is_fully_completed)
        self.discard_snapshot()
        return completed

    def continue_session(self) -> bool:
        """Complete the current session and loop back to loading a new batch."""
        if not self.lifecycle.is_active:
            return False
        self._complete(True)
        self.session_count += 1
        self.lifecycle.reset()
        return self._begin()

    def teardown(self) -> None:
        """Best-effort abandonment of an in-progress session."""
        if self.lifecycle.is_active:
            self._close_out(False)

    # ── Persistence ─────────────────────────────────────────────────

    def to_snapshot(self) -> SessionSnapshot:
        state = {
            'session_id': self.session_id,
            'session_count': self.session_count,
            'phase': self.phase,
            'lifecycle': self.lifecycle.state,
            'collection_id': self.collection_id,
        }
        state.update(self._state_to_dict())
        return SessionSnapshot(engine_type=self.engine_type, state=state, timestamp=self.clock())

    def restore(self, state: Dict[str, Any]) -> None:
        """Load engine state from a snapshot state dict. Raises on malformed input."""
        self.session_id = state['session_id']
        self.session_count = int(state['session_count'])
        self.phase = state['phase']
        self.lifecycle = SessionLifecycle(state['lifecycle'])
        self.collection_id = state.get('collection_id')
        self._state_from_dict(state)

    def persist(self) -> None:
        if self.snapshot_store is None:
            return
        try:
            self.snapshot_store.save(self.to_snapshot())
        except Exception as e:
            logger.error(f"Saving {self.engine_type} snapshot failed: {e}", exc_info=True)

    def discard_snapshot(self) -> None:
        if self.snapshot_store is None:
            return
        try:
            self.snapshot_store.clear(self.engine_type)
        except Exception as e:
            logger.error(f"Clearing {self.engine_type} snapshot failed: {e}", exc_info=True)

    def resume(self) -> bool:
        """
        Restore the stored session if it is compatible and within the timeout.

        A stale snapshot of a still active session is closed out best-effort
        before it is dropped; any unusable snapshot is discarded silently.
        """
        if self.snapshot_store is None:
            return False
        payload = self.snapshot_store.load(self.engine_type)
        if payload is None:
            return False

        try:
            snapshot = SessionSnapshot.from_dict(payload)
        except ValueError as e:
            logger.info(f"Discarding unreadable {self.engine_type} snapshot: {e}")
            self.discard_snapshot()
            return False

        if not snapshot.is_compatible(self.engine_type):
            logger.info(f"Discarding incompatible {self.engine_type} snapshot (version {snapshot.version})")
            self.discard_snapshot()
            return False

        try:
            self.restore(snapshot.state)
        except (KeyError, TypeError, ValueError) as e:
            logger.info(f"Discarding malformed {self.engine_type} snapshot: {e}")
            self._reset_after_failed_restore()
            self.discard_snapshot()
            return False

        if snapshot.is_expired(self.clock(), self.timeout_ms):
            logger.info(f"Discarding stale {self.engine_type} snapshot of session {self.session_id}")
            self.teardown()
            self._reset_after_failed_restore()
            self.discard_snapshot()
            return False

        return True

    def _reset_after_failed_restore(self) -> None:
        self._reset_session_state()
        self.session_id = None
        self.session_count = 1
        self.phase = PHASE_IDLE
        self.lifecycle = SessionLifecycle()

    # ── Presentation ────────────────────────────────────────────────

    def base_view(self) -> Dict[str, Any]:
        return {
            'engine': self.engine_type,
            'phase': self.phase,
            'session_id': self.session_id,
            'session_count': self.session_count,
            'notices': list(self.notices),
        }
