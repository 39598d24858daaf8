from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_definition, make_user
from lexistack_app.core.signals import words_saved
from lexistack_app.models import (
    db,
    Collection,
    CollectionWord,
    PracticeSession,
    PracticeSessionWord,
    UserWord,
    Word,
    WordMeaning,
)
from lexistack_app.modules.library.interface import CollectionStore, PracticeWordSource
from lexistack_app.modules.shared.utils import db_session
from lexistack_app.modules.shared.utils.db_session import insert_or_fetch, safe_commit


@pytest.fixture
def travel(user):
    return CollectionStore.get_or_create_collection(user.user_id, 'Travel')


class TestInsertOrFetch:
    def test_inserts_then_fetches(self, app):
        first, created = insert_or_fetch(db.session, Word, {'text': 'apple'}, defaults={'phonetic': '/ap/'})
        second, created_again = insert_or_fetch(db.session, Word, {'text': 'apple'}, defaults={'phonetic': 'other'})

        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert second.phonetic == '/ap/'

    def test_conflict_returns_the_existing_row(self, app, monkeypatch):
        """Another writer inserts between our lookup and our commit."""
        winner = Word(text='apple')
        db.session.add(winner)
        db.session.commit()
        winner_id = winner.id

        real_find = db_session._find
        calls = []

        def racing_find(session, model, natural_key):
            calls.append(natural_key)
            if len(calls) == 1:
                return None
            return real_find(session, model, natural_key)

        monkeypatch.setattr(db_session, '_find', racing_find)

        row, created = insert_or_fetch(db.session, Word, {'text': 'apple'})

        assert created is False
        assert row.id == winner_id
        assert len(calls) == 2
        assert Word.query.filter_by(text='apple').count() == 1

    def test_failed_commit_rolls_back_and_raises(self):
        session = MagicMock()
        session.commit.side_effect = OperationalError('COMMIT', {}, Exception('database is locked'))

        with pytest.raises(OperationalError):
            safe_commit(session)

        session.commit.assert_called_once()
        session.rollback.assert_called_once()

    def test_lost_insert_is_never_reported_as_created(self, app, monkeypatch):
        def locked_commit():
            raise OperationalError('COMMIT', {}, Exception('database is locked'))

        monkeypatch.setattr(db.session(), 'commit', locked_commit)

        with pytest.raises(OperationalError):
            insert_or_fetch(db.session, Word, {'text': 'apple'})

        monkeypatch.undo()
        assert Word.query.filter_by(text='apple').count() == 0


class TestCollections:
    def test_get_or_create_is_idempotent(self, user):
        first = CollectionStore.get_or_create_collection(user.user_id, 'Travel')
        second = CollectionStore.get_or_create_collection(user.user_id, 'Travel')

        assert first.id == second.id
        assert Collection.query.filter_by(user_id=user.user_id, name='Travel').count() == 1

    def test_names_are_scoped_per_user(self, user):
        other = make_user('other')
        mine = CollectionStore.get_or_create_collection(user.user_id, 'Travel')
        theirs = CollectionStore.get_or_create_collection(other.user_id, 'Travel')

        assert mine.id != theirs.id

    def test_create_rejects_duplicate_name(self, user, travel):
        assert CollectionStore.create_collection(user.user_id, 'Travel') is None
        created = CollectionStore.create_collection(user.user_id, 'Food', 'Things to eat')
        assert created.description == 'Things to eat'

    def test_owned_collection_checks_owner(self, user, travel):
        other = make_user('other')
        assert CollectionStore.get_owned_collection(travel.id, user.user_id).id == travel.id
        assert CollectionStore.get_owned_collection(travel.id, other.user_id) is None
        assert CollectionStore.get_collection_words(travel.id, other.user_id) == []


class TestAddingWords:
    def test_add_creates_word_meanings_and_entries(self, user, travel):
        assert CollectionStore.add_word_to_collection(user.user_id, make_definition('journey'), travel.id) is True

        word = Word.query.filter_by(text='journey').one()
        assert word.phonetic == '/journey/'
        assert word.audio_url == 'https://media.example.com/journey.mp3'
        assert [m.ordinal_index for m in word.meanings] == [0, 1]
        assert CollectionWord.query.filter_by(collection_id=travel.id).count() == 2
        assert UserWord.query.filter_by(user_id=user.user_id, word_id=word.id).count() == 1
        assert db.session.get(Collection, travel.id).word_count == 1

    def test_adding_twice_creates_nothing_new(self, user, travel):
        CollectionStore.add_word_to_collection(user.user_id, make_definition('journey'), travel.id)
        assert CollectionStore.add_word_to_collection(user.user_id, make_definition('journey'), travel.id) is True

        assert Word.query.count() == 1
        assert WordMeaning.query.count() == 2
        assert CollectionWord.query.count() == 2
        assert UserWord.query.count() == 1

    def test_existing_meanings_are_never_appended(self, user, travel):
        CollectionStore.add_word_to_collection(user.user_id, make_definition('journey', meanings=('trip',)), travel.id)
        CollectionStore.add_word_to_collection(
            user.user_id, make_definition('journey', meanings=('voyage', 'passage', 'route')), travel.id
        )

        assert [m.definition for m in WordMeaning.query.all()] == ['trip']

    def test_word_without_meanings_is_rejected(self, user, travel):
        assert CollectionStore.add_word_to_collection(user.user_id, make_definition('empty', meanings=()), travel.id) is False
        assert CollectionWord.query.count() == 0

    def test_malformed_definition_is_rejected(self, user, travel):
        assert CollectionStore.add_word_to_collection(user.user_id, {'part_of_speech': 'noun'}, travel.id) is False
        assert Word.query.count() == 0

    def test_unknown_collection(self, user):
        assert CollectionStore.add_word_to_collection(user.user_id, make_definition('journey'), 999) is False

    def test_save_words_emits_signal(self, user):
        received = []

        def receiver(sender, **kwargs):
            received.append(kwargs)

        with words_saved.connected_to(receiver):
            saved = CollectionStore.save_words(
                user.user_id, 'Trip', [make_definition('journey'), make_definition('ticket')]
            )

        assert saved == 2
        assert received[0]['saved_count'] == 2
        assert received[0]['user_id'] == user.user_id
        assert db.session.get(Collection, received[0]['collection_id']).name == 'Trip'


class TestRemovingWords:
    def test_user_word_survives_until_last_collection(self, user, travel):
        food = CollectionStore.get_or_create_collection(user.user_id, 'Food')
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), travel.id)
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), food.id)
        word_id = Word.query.filter_by(text='pepper').one().id

        assert CollectionStore.remove_word_from_collection(travel.id, word_id, user.user_id) is True
        assert UserWord.query.filter_by(user_id=user.user_id, word_id=word_id).count() == 1
        assert db.session.get(Collection, travel.id).word_count == 0

        assert CollectionStore.remove_word_from_collection(food.id, word_id, user.user_id) is True
        assert UserWord.query.filter_by(user_id=user.user_id, word_id=word_id).count() == 0

    def test_remove_deletes_practice_rows_of_that_collection(self, user, travel):
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), travel.id)
        word = Word.query.filter_by(text='pepper').one()
        session = PracticeSession(user_id=user.user_id, mode='flashcard', total_words=1)
        db.session.add(session)
        db.session.commit()
        db.session.add(PracticeSessionWord(
            session_id=session.id, user_id=user.user_id, word_id=word.id,
            meaning_id=word.meanings[0].id, collection_id=travel.id, is_correct=True,
        ))
        db.session.commit()

        CollectionStore.remove_word_from_collection(travel.id, word.id, user.user_id)

        assert PracticeSessionWord.query.count() == 0

    def test_remove_missing_word(self, user, travel):
        assert CollectionStore.remove_word_from_collection(travel.id, 12345, user.user_id) is False


class TestStatusAndSearch:
    def test_update_status(self, user, travel):
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), travel.id)
        word_id = Word.query.one().id

        assert CollectionStore.update_word_status(travel.id, word_id, user.user_id, 'known') is True
        assert {e.status for e in CollectionWord.query.all()} == {'known'}
        assert CollectionStore.update_word_status(travel.id, word_id, user.user_id, 'mastered') is False

    def test_search_matches_word_text_first(self, user, travel):
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper', meanings=('a spice',)), travel.id)
        CollectionStore.add_word_to_collection(user.user_id, make_definition('salt', meanings=('pepper companion',)), travel.id)

        results = CollectionStore.search_words('pepp')

        assert [r['word'] for r in results] == ['pepper']
        assert results[0]['meanings'][0]['definition'] == 'a spice'

    def test_search_falls_back_to_definitions(self, user, travel):
        CollectionStore.add_word_to_collection(
            user.user_id, make_definition('salt', meanings=('a white seasoning', 'seasoning for food')), travel.id
        )

        results = CollectionStore.search_words('seasoning')

        assert len(results) == 1
        assert results[0]['word'] == 'salt'
        assert len(results[0]['meanings']) == 2

    def test_search_needs_two_characters(self, app):
        assert CollectionStore.search_words('a') == []
        assert CollectionStore.search_words('  ') == []


class TestPracticeWordSource:
    def test_batch_is_bounded_and_distinct(self, user, travel):
        for text in ('alpha', 'bravo', 'charlie'):
            CollectionStore.add_word_to_collection(user.user_id, make_definition(text), travel.id)

        batch = PracticeWordSource().fetch(user.user_id, 2)

        assert len(batch) == 2
        assert len({item['word_id'] for item in batch}) == 2
        assert all(len(item['meanings']) == 2 for item in batch)

    def test_known_and_recently_reviewed_words_come_last(self, user, travel):
        for text in ('alpha', 'bravo', 'charlie'):
            CollectionStore.add_word_to_collection(user.user_id, make_definition(text, meanings=('m',)), travel.id)
        alpha, bravo, charlie = (Word.query.filter_by(text=t).one() for t in ('alpha', 'bravo', 'charlie'))

        CollectionStore.update_word_status(travel.id, alpha.id, user.user_id, 'known')
        entry = CollectionWord.query.filter_by(word_id=bravo.id).one()
        entry.last_reviewed_at = datetime.now(timezone.utc) - timedelta(days=1)
        db.session.commit()

        batch = PracticeWordSource().fetch(user.user_id, 5)

        assert [item['word'] for item in batch] == ['charlie', 'bravo', 'alpha']

    def test_collection_filter(self, user, travel):
        food = CollectionStore.get_or_create_collection(user.user_id, 'Food')
        CollectionStore.add_word_to_collection(user.user_id, make_definition('ticket'), travel.id)
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), food.id)

        batch = PracticeWordSource().fetch(user.user_id, 5, collection_id=food.id)

        assert [item['word'] for item in batch] == ['pepper']
        assert batch[0]['collection_id'] == food.id

    def test_word_in_two_collections_appears_once(self, user, travel):
        food = CollectionStore.get_or_create_collection(user.user_id, 'Food')
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), travel.id)
        CollectionStore.add_word_to_collection(user.user_id, make_definition('pepper'), food.id)

        batch = PracticeWordSource().fetch(user.user_id, 5)

        assert len(batch) == 1
        assert len(batch[0]['meanings']) == 2
