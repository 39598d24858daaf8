# File: lexistack_app/config.py

import os

from dotenv import load_dotenv

load_dotenv()

# config.py lives in lexistack_app/, the project root is one level up
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "lexistack.db")


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """LexiStack application configuration."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        # Fallback for development, the environment value wins in production
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Learner's Dictionary (Merriam-Webster) lookups
    DICTIONARY_API_KEY = os.environ.get('DICTIONARY_API_KEY')
    DICTIONARY_API_URL = os.environ.get(
        'DICTIONARY_API_URL',
        'https://www.dictionaryapi.com/api/v3/references/learners/json',
    )
    DICTIONARY_TIMEOUT = float(os.environ.get('DICTIONARY_TIMEOUT', '10'))

    # Gemini vocabulary extraction. GEMINI_MODEL may list fallbacks separated by commas.
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash,gemini-2.0-flash-lite-001')

    # Practice games
    PRACTICE_SESSION_CAPACITY = int(os.environ.get('PRACTICE_SESSION_CAPACITY', '5'))
    PRACTICE_SNAPSHOT_TIMEOUT_MINUTES = int(os.environ.get('PRACTICE_SNAPSHOT_TIMEOUT_MINUTES', '30'))
    QUIZ_QUESTION_SOURCE = os.environ.get('QUIZ_QUESTION_SOURCE', 'local')  # local | ai

    # Background jobs
    SCHEDULER_ENABLED = _env_bool('SCHEDULER_ENABLED', False)
    SCHEDULER_API_ENABLED = False
    ABANDONED_SESSION_CLEANUP_MINUTES = int(os.environ.get('ABANDONED_SESSION_CLEANUP_MINUTES', '30'))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR')
    LOG_JSON = _env_bool('LOG_JSON', False)

    @classmethod
    def init_app(cls, app):
        """Create the directories the configured paths need."""
        if app.config['SQLALCHEMY_DATABASE_URI'] == f'sqlite:///{DATABASE_PATH}':
            os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
        if app.config.get('LOG_DIR'):
            os.makedirs(app.config['LOG_DIR'], exist_ok=True)
