"""Practice session models and the server-side engine snapshot store."""

from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..db_instance import db


def _utcnow():
    return datetime.now(timezone.utc)


class PracticeSession(db.Model):
    """
    One bounded run of a practice game.

    Created with ``correct_answers=0`` at the start of a run and finalised
    exactly once when the run ends. A run that recorded nothing is deleted
    instead of finalised.
    """
    __tablename__ = 'practice_sessions'

    MODE_FLASHCARD = 'flashcard'
    MODE_QUIZ = 'quiz'
    MODE_FINDWORD = 'findword'
    MODES = (MODE_FLASHCARD, MODE_QUIZ, MODE_FINDWORD)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    mode = db.Column(db.String(20), nullable=False)
    total_words = db.Column(db.Integer, default=0, nullable=False)
    correct_answers = db.Column(db.Integer, default=0, nullable=False)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    words = db.relationship(
        'PracticeSessionWord',
        backref='session',
        lazy='dynamic',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'mode': self.mode,
            'total_words': self.total_words,
            'correct_answers': self.correct_answers,
            'completed': bool(self.completed),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    @property
    def is_finalised(self):
        return self.completed_at is not None


class PracticeSessionWord(db.Model):
    """Durable record that a word was practiced within a session. One row per (session, word)."""

    __tablename__ = 'practice_session_words'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'word_id', name='uq_practice_session_word'),
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('practice_sessions.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False)
    word_id = db.Column(db.Integer, db.ForeignKey('words.id', ondelete='CASCADE'), nullable=False)
    meaning_id = db.Column(db.Integer, db.ForeignKey('word_meanings.id', ondelete='CASCADE'), nullable=True)
    collection_id = db.Column(db.Integer, db.ForeignKey('collections.id', ondelete='CASCADE'), nullable=True)
    is_correct = db.Column(db.Boolean, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'session_id': self.session_id,
            'word_id': self.word_id,
            'meaning_id': self.meaning_id,
            'collection_id': self.collection_id,
            'is_correct': self.is_correct,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class PracticeSnapshot(db.Model):
    """Latest serialised engine state per (user, engine key)."""

    __tablename__ = 'practice_snapshots'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'engine_key', name='uq_practice_snapshot_key'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False)
    engine_key = db.Column(db.String(64), nullable=False)
    payload = db.Column(JSON, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
