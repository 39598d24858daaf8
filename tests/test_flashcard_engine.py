import json
import random

from conftest import FakeClock, FakeTracker, FakeWordSource, InMemorySnapshotStore, make_words
from lexistack_app.modules.practice.engine.snapshot import SNAPSHOT_VERSION
from lexistack_app.modules.practice.flashcard.engine import FlashcardGameEngine, card_key


def build_engine(words=None, tracker=None, store=None, clock=None, seed=42, capacity=5):
    return FlashcardGameEngine(
        user_id=1,
        tracker=tracker or FakeTracker(),
        word_source=FakeWordSource(make_words() if words is None else words),
        snapshot_store=store if store is not None else InMemorySnapshotStore(),
        rng=random.Random(seed),
        clock=clock or FakeClock(),
        capacity=capacity,
    )


def reload(engine, tracker, store, clock, words=None):
    """Simulate the next request: a new engine restored from the stored snapshot."""
    restored = build_engine(words=words, tracker=tracker, store=store, clock=clock)
    assert restored.resume() is True
    return restored


class TestLoading:
    def test_start_builds_cards_and_opens_session(self, tracker):
        engine = build_engine(tracker=tracker)

        assert engine.start() is True
        assert engine.phase == 'active'
        assert len(engine.cards) == 5
        assert engine.current_index == 0
        assert tracker.started == [(1, 'flashcard', 5, engine.session_id)]
        for card in engine.cards:
            assert card['initial_side'] in ('definition', 'word')
            assert card['key'] == card_key(card['word_id'], card['meaning_id'])

    def test_batch_is_bounded_by_capacity(self, tracker):
        engine = build_engine(words=make_words(8), tracker=tracker, capacity=5)
        engine.start()
        assert len(engine.cards) == 5

    def test_empty_batch_does_not_start(self, tracker, snapshot_store):
        engine = build_engine(words=[], tracker=tracker, store=snapshot_store)

        assert engine.start() is False
        assert engine.phase == 'empty'
        assert tracker.started == []
        assert engine.notices[0]['level'] == 'info'
        assert snapshot_store.data == {}

    def test_failed_tracker_start_is_an_error_notice(self, tracker):
        tracker.fail_start = True
        engine = build_engine(tracker=tracker)

        assert engine.start() is False
        assert engine.phase == 'error'
        assert engine.notices[0]['level'] == 'error'

    def test_seeded_random_policy_is_reproducible(self):
        words = make_words(5, meanings_per_word=3)
        first = build_engine(words=words, seed=7)
        second = build_engine(words=words, seed=7)
        first.start()
        second.start()

        assert [c['meaning_id'] for c in first.cards] == [c['meaning_id'] for c in second.cards]
        assert [c['initial_side'] for c in first.cards] == [c['initial_side'] for c in second.cards]

    def test_meaning_is_one_of_the_candidates(self):
        words = make_words(3, meanings_per_word=4)
        engine = build_engine(words=words)
        engine.start()
        for card, word in zip(engine.cards, words):
            assert card['meaning_id'] in {m['meaning_id'] for m in word['meanings']}


class TestFlipping:
    def test_first_flip_records_once(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()

        engine.flip()
        engine.flip()
        engine.flip()

        assert len(tracker.records) == 1
        session_id, word_id, _, _, is_correct = tracker.records[0]
        assert session_id == engine.session_id
        assert word_id == engine.cards[0]['word_id']
        assert is_correct is True
        assert engine.practiced_words == [engine.cards[0]['key']]

    def test_flip_toggles_face(self):
        engine = build_engine()
        engine.start()
        assert engine.flip() is True
        assert engine.is_flipped is True
        engine.flip()
        assert engine.is_flipped is False

    def test_failed_record_stays_retryable(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()
        failing_word = engine.cards[0]['word_id']
        tracker.failing_words.add(failing_word)

        engine.flip()
        assert engine.recorded_word_keys == set()
        assert any(n['level'] == 'warning' for n in engine.notices)

        tracker.failing_words.clear()
        engine.finish()
        assert [r[1] for r in tracker.records] == [failing_word]
        assert tracker.completions[-1][1] == 1

    def test_flip_without_session_is_ignored(self, tracker):
        engine = build_engine(tracker=tracker)
        assert engine.flip() is False
        assert tracker.records == []


class TestNavigation:
    def test_next_resets_flip_state(self):
        engine = build_engine()
        engine.start()
        engine.flip()

        assert engine.next() is True
        assert engine.current_index == 1
        assert engine.is_flipped is False
        assert engine.card_flipped_once is False

    def test_next_is_noop_on_last_card(self):
        engine = build_engine(words=make_words(2))
        engine.start()
        engine.next()

        assert engine.next() is False
        assert engine.current_index == 1


class TestCompletion:
    def test_flip_next_flip_finish_scenario(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()

        engine.flip()
        engine.flip()
        engine.next()
        engine.flip()
        summary = engine.finish()

        assert len(tracker.records) == 2
        assert tracker.completions == [(engine.session_id, 2, True, 2)]
        assert summary['completed'] is True
        assert summary['words_recorded'] == 2
        assert engine.phase == 'closed'

    def test_completion_runs_once(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()
        engine.flip()

        engine.finish()
        assert engine.finish() is None
        assert engine.back() is False
        engine.teardown()

        assert len(tracker.completions) == 1

    def test_back_without_flips_reports_empty_session(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()

        assert engine.back() is False
        assert tracker.completions == [(engine.session_id, 0, False, 0)]

    def test_back_after_flip_asks_for_acknowledgment(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()
        engine.flip()

        assert engine.back() is True
        assert tracker.completions == [(engine.session_id, 1, False, 1)]

    def test_continue_starts_a_new_session(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()
        first_session = engine.session_id
        engine.flip()

        assert engine.continue_session() is True
        assert tracker.completions == [(first_session, 1, True, 1)]
        assert engine.session_id != first_session
        assert engine.session_count == 2
        assert engine.practiced_words == []
        assert engine.recorded_word_keys == set()
        assert engine.phase == 'active'

    def test_restart_tears_down_previous_session(self, tracker):
        engine = build_engine(tracker=tracker)
        engine.start()
        engine.flip()
        old_session = engine.session_id

        engine.start()

        assert tracker.completions == [(old_session, 1, False, 1)]
        assert engine.session_count == 1


class TestPersistence:
    def test_resume_restores_recorded_keys(self, tracker, snapshot_store, clock):
        engine = build_engine(tracker=tracker, store=snapshot_store, clock=clock)
        engine.start()
        engine.flip()

        restored = reload(engine, tracker, snapshot_store, clock)

        assert restored.recorded_word_keys == engine.recorded_word_keys
        assert restored.cards == engine.cards
        assert restored.session_id == engine.session_id
        assert restored.card_flipped_once is True

        # Flipping the restored card again must not record a second time
        restored.flip()
        assert len(tracker.records) == 1

    def test_double_request_does_not_double_record(self, tracker, snapshot_store, clock):
        engine = build_engine(tracker=tracker, store=snapshot_store, clock=clock)
        engine.start()

        for _ in range(3):
            reload(engine, tracker, snapshot_store, clock).flip()

        assert len(tracker.records) == 1

    def test_stale_snapshot_is_discarded_and_closed(self, tracker, snapshot_store, clock):
        engine = build_engine(tracker=tracker, store=snapshot_store, clock=clock)
        engine.start()
        engine.flip()
        clock.advance_minutes(31)

        fresh = build_engine(tracker=tracker, store=snapshot_store, clock=clock)

        assert fresh.resume() is False
        assert fresh.phase == 'idle'
        assert snapshot_store.data == {}
        assert tracker.completions == [(engine.session_id, 1, False, 1)]

    def test_snapshot_within_timeout_is_kept(self, tracker, snapshot_store, clock):
        engine = build_engine(tracker=tracker, store=snapshot_store, clock=clock)
        engine.start()
        clock.advance_minutes(29)

        assert build_engine(tracker=tracker, store=snapshot_store, clock=clock).resume() is True

    def test_incompatible_version_is_discarded(self, snapshot_store, clock):
        engine = build_engine(store=snapshot_store, clock=clock)
        engine.start()
        payload = snapshot_store.load('flashcard')
        payload['version'] = SNAPSHOT_VERSION + 1
        snapshot_store.data['flashcard'] = json.dumps(payload)

        assert build_engine(store=snapshot_store, clock=clock).resume() is False
        assert snapshot_store.data == {}

    def test_finish_clears_snapshot(self, snapshot_store):
        engine = build_engine(store=snapshot_store)
        engine.start()
        engine.finish()
        assert snapshot_store.data == {}
