# File: lexistack_app/modules/practice/engine/snapshot.py
"""
Versioned engine snapshots.

An engine writes its full state after every mutation so the next request
(or a reload of the page) can pick the session up again. A snapshot is only
restored when its version and engine type match and it is younger than the
configured timeout; anything else is discarded.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict

SNAPSHOT_VERSION = 1

ENGINE_FLASHCARD = 'flashcard'
ENGINE_QUIZ = 'quiz'

SNAPSHOT_KEYS = {
    ENGINE_FLASHCARD: 'flashcard_session_state',
    ENGINE_QUIZ: 'quiz_session_state',
}


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class SessionSnapshot:
    engine_type: str
    state: Dict[str, Any] = field(default_factory=dict)
    version: int = SNAPSHOT_VERSION
    timestamp: int = 0  # milliseconds since epoch

    def to_dict(self) -> Dict[str, Any]:
        return {
            'engine_type': self.engine_type,
            'version': self.version,
            'timestamp': self.timestamp,
            'state': self.state,
        }

    @classmethod
    def from_dict(cls, data) -> 'SessionSnapshot':
        """Parse a stored payload. Raises ValueError when it is not a snapshot."""
        if not isinstance(data, dict):
            raise ValueError('snapshot payload must be an object')
        try:
            snapshot = cls(
                engine_type=str(data['engine_type']),
                state=data['state'],
                version=int(data['version']),
                timestamp=int(data['timestamp']),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f'malformed snapshot: {e}') from e
        if not isinstance(snapshot.state, dict):
            raise ValueError('snapshot state must be an object')
        return snapshot

    def is_compatible(self, engine_type: str) -> bool:
        return self.version == SNAPSHOT_VERSION and self.engine_type == engine_type

    def is_expired(self, now: int, timeout_ms: int) -> bool:
        return now - self.timestamp > timeout_ms

    def is_valid(self, engine_type: str, now: int, timeout_ms: int) -> bool:
        return self.is_compatible(engine_type) and not self.is_expired(now, timeout_ms)
