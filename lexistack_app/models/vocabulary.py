"""Vocabulary domain models: words, meanings, collections and their junctions."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..db_instance import db


def _utcnow():
    return datetime.now(timezone.utc)


class Word(db.Model):
    """A dictionary headword shared by every user. ``text`` is unique store-wide."""

    __tablename__ = 'words'

    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phonetic = db.Column(db.String(255), nullable=True)
    audio_url = db.Column(db.String(512), nullable=True)
    stems = db.Column(JSON, default=list)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    meanings = db.relationship(
        'WordMeaning',
        backref='word',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='WordMeaning.ordinal_index',
    )

    def to_dict(self, include_meanings: bool = False):
        data = {
            'id': self.id,
            'word': self.text,
            'phonetic': self.phonetic,
            'audio_url': self.audio_url,
            'stems': list(self.stems or []),
        }
        if include_meanings:
            data['meanings'] = [meaning.to_dict() for meaning in self.meanings]
        return data


class WordMeaning(db.Model):
    """One definition (with examples) of a word."""

    __tablename__ = 'word_meanings'
    __table_args__ = (
        db.UniqueConstraint('word_id', 'ordinal_index', name='uq_word_meaning_ordinal'),
    )

    id = db.Column(db.Integer, primary_key=True)
    word_id = db.Column(db.Integer, db.ForeignKey('words.id', ondelete='CASCADE'), nullable=False, index=True)
    ordinal_index = db.Column(db.Integer, nullable=False, default=0)
    part_of_speech = db.Column(db.String(50), nullable=True)
    definition = db.Column(db.Text, nullable=False)
    examples = db.Column(JSON, default=list)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'word_id': self.word_id,
            'ordinal_index': self.ordinal_index,
            'part_of_speech': self.part_of_speech,
            'definition': self.definition,
            'examples': list(self.examples or []),
        }


class Collection(db.Model):
    """A user-named bucket of vocabulary words."""

    __tablename__ = 'collections'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'name', name='uq_collection_user_name'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    word_count = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    entries = db.relationship(
        'CollectionWord',
        backref='collection',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'word_count': self.word_count or 0,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class CollectionWord(db.Model):
    """Association of one word meaning with one collection, carrying practice status."""

    __tablename__ = 'collection_words'
    __table_args__ = (
        db.UniqueConstraint('collection_id', 'word_id', 'meaning_id', 'user_id', name='uq_collection_word_meaning'),
    )

    STATUS_NEW = 'new'
    STATUS_LEARNING = 'learning'
    STATUS_KNOWN = 'known'
    STATUSES = (STATUS_NEW, STATUS_LEARNING, STATUS_KNOWN)

    id = db.Column(db.Integer, primary_key=True)
    collection_id = db.Column(db.Integer, db.ForeignKey('collections.id', ondelete='CASCADE'), nullable=False, index=True)
    word_id = db.Column(db.Integer, db.ForeignKey('words.id', ondelete='CASCADE'), nullable=False, index=True)
    meaning_id = db.Column(db.Integer, db.ForeignKey('word_meanings.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    status = db.Column(db.String(20), default=STATUS_NEW, nullable=False)
    last_reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    review_count = db.Column(db.Integer, default=0, nullable=False)
    next_review_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    word = db.relationship('Word', lazy='joined')
    meaning = db.relationship('WordMeaning', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'collection_id': self.collection_id,
            'word_id': self.word_id,
            'meaning_id': self.meaning_id,
            'status': self.status,
            'review_count': self.review_count or 0,
            'last_reviewed_at': self.last_reviewed_at.isoformat() if self.last_reviewed_at else None,
            'next_review_at': self.next_review_at.isoformat() if self.next_review_at else None,
            'word': self.word.to_dict() if self.word else None,
            'meaning': self.meaning.to_dict() if self.meaning else None,
        }


class UserWord(db.Model):
    """Entry of the user's global word list, independent of collections."""

    __tablename__ = 'user_words'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'word_id', name='uq_user_word'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False, index=True)
    word_id = db.Column(db.Integer, db.ForeignKey('words.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    word = db.relationship('Word', lazy='joined')
