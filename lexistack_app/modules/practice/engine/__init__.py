"""Shared machinery of the practice game engines."""

from .lifecycle import SessionLifecycle
from .snapshot import (
    ENGINE_FLASHCARD,
    ENGINE_QUIZ,
    SNAPSHOT_KEYS,
    SNAPSHOT_VERSION,
    SessionSnapshot,
)

__all__ = [
    'ENGINE_FLASHCARD',
    'ENGINE_QUIZ',
    'SNAPSHOT_KEYS',
    'SNAPSHOT_VERSION',
    'SessionLifecycle',
    'SessionSnapshot',
]
