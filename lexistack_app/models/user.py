"""User model: identity for Flask-Login plus the practice profile statistics."""

from __future__ import annotations

from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..db_instance import db


class User(UserMixin, db.Model):
    """Application user model."""

    __tablename__ = 'users'

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Profile statistics, recomputed when a practice session completes
    streak_count = db.Column(db.Integer, default=0, nullable=False)
    words_learned = db.Column(db.Integer, default=0, nullable=False)
    accuracy = db.Column(db.Float, default=0.0, nullable=False)
    last_practice_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.user_id)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'username': self.username,
            'email': self.email,
            'streak_count': self.streak_count or 0,
            'words_learned': self.words_learned or 0,
            'accuracy': round(self.accuracy or 0.0, 1),
            'last_practice_at': self.last_practice_at.isoformat() if self.last_practice_at else None,
        }

    def __repr__(self) -> str:
        return f'<User {self.username}>'
