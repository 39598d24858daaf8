import copy
import json
import os
import random
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from lexistack_app import create_app, db
from lexistack_app.config import Config
from lexistack_app.models import User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    SCHEDULER_ENABLED = False
    DICTIONARY_API_KEY = 'test-dictionary-key'
    GEMINI_API_KEY = 'test-gemini-key'
    QUIZ_QUESTION_SOURCE = 'local'
    LOG_DIR = None


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(username='learner', password='secret123'):
    user = User(username=username, email=f'{username}@example.com')
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def user(app):
    return make_user()


def login_client(client, user_id):
    with client.session_transaction() as session:
        session['_user_id'] = str(user_id)
        session['_fresh'] = True


@pytest.fixture
def auth_client(client, user):
    login_client(client, user.user_id)
    return client


# ── In-memory collaborators for the game engines ─────────────────────


class FakeTracker:
    """Records every call; failures can be switched on per operation or word."""

    def __init__(self):
        self.next_id = 100
        self.fail_start = False
        self.fail_complete = False
        self.failing_words = set()
        self.started = []
        self.records = []
        self.completions = []

    def start(self, user_id, mode, total_words):
        if self.fail_start:
            return None
        self.next_id += 1
        self.started.append((user_id, mode, total_words, self.next_id))
        return self.next_id

    def record(self, session_id, word_id, meaning_id, collection_id, is_correct):
        if word_id in self.failing_words:
            return False
        self.records.append((session_id, word_id, meaning_id, collection_id, is_correct))
        return True

    def complete(self, session_id, correct_count, is_fully_completed, recorded_count):
        self.completions.append((session_id, correct_count, is_fully_completed, recorded_count))
        return not self.fail_complete


class FakeWordSource:
    def __init__(self, words=None):
        self.words = words or []
        self.calls = []

    def fetch(self, user_id, limit, collection_id=None):
        self.calls.append((user_id, limit, collection_id))
        return copy.deepcopy(self.words[:limit])


class InMemorySnapshotStore:
    """Stores payloads as JSON text, the way the database column would."""

    def __init__(self):
        self.data = {}

    def load(self, engine_type):
        raw = self.data.get(engine_type)
        return json.loads(raw) if raw is not None else None

    def save(self, snapshot):
        self.data[snapshot.engine_type] = json.dumps(snapshot.to_dict())
        return True

    def clear(self, engine_type):
        self.data.pop(engine_type, None)
        return True


class FakeClock:
    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance_minutes(self, minutes):
        self.now += int(minutes * 60 * 1000)


def make_words(count=5, meanings_per_word=1, collection_id=7):
    words = []
    for i in range(1, count + 1):
        words.append({
            'word_id': i,
            'word': f'word{i}',
            'phonetic': None,
            'audio_url': None,
            'collection_id': collection_id,
            'meanings': [
                {
                    'meaning_id': i * 10 + m,
                    'part_of_speech': 'noun',
                    'definition': f'definition {m} of word{i}',
                    'examples': [f'An example with word{i} in it.'],
                }
                for m in range(meanings_per_word)
            ],
        })
    return words


@pytest.fixture
def tracker():
    return FakeTracker()


@pytest.fixture
def snapshot_store():
    return InMemorySnapshotStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(42)


def make_definition(word, meanings=('a first meaning', 'a second meaning'), examples=None):
    """A looked-up dictionary entry in the shape the collection store accepts."""
    return {
        'word': word,
        'part_of_speech': 'noun',
        'pronunciation': {'text': f'/{word}/', 'audio': f'https://media.example.com/{word}.mp3'},
        'definitions': [
            {'meaning': meaning, 'examples': list(examples or [f'I like {word}.'])}
            for meaning in meanings
        ],
        'stems': [word, f'{word}s'],
    }
