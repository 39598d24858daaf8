# File: lexistack_app/modules/practice/engine/snapshot_store.py
"""Database-backed storage of engine snapshots, scoped per user."""

from typing import Any, Dict, Optional

from flask import current_app

from lexistack_app.models import db, PracticeSnapshot
from lexistack_app.modules.shared.utils.db_session import insert_or_fetch, safe_commit

from .snapshot import SNAPSHOT_KEYS, SessionSnapshot


class SnapshotStore:
    """Per-user snapshot storage in the ``practice_snapshots`` table."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def load(self, engine_type: str) -> Optional[Dict[str, Any]]:
        """Return the raw stored payload, or None when there is none."""
        try:
            row = PracticeSnapshot.query.filter_by(
                user_id=self.user_id, engine_key=SNAPSHOT_KEYS[engine_type]
            ).first()
            return row.payload if row else None
        except Exception as e:
            current_app.logger.error(f"Error loading {engine_type} snapshot for user {self.user_id}: {e}")
            return None

    def save(self, snapshot: SessionSnapshot) -> bool:
        try:
            payload = snapshot.to_dict()
            row, created = insert_or_fetch(
                db.session,
                PracticeSnapshot,
                {'user_id': self.user_id, 'engine_key': SNAPSHOT_KEYS[snapshot.engine_type]},
                defaults={'payload': payload},
            )
            if not created:
                row.payload = payload
                safe_commit(db.session)
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error saving {snapshot.engine_type} snapshot for user {self.user_id}: {e}", exc_info=True)
            return False

    def clear(self, engine_type: str) -> bool:
        try:
            PracticeSnapshot.query.filter_by(
                user_id=self.user_id, engine_key=SNAPSHOT_KEYS[engine_type]
            ).delete(synchronize_session=False)
            safe_commit(db.session)
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error clearing {engine_type} snapshot for user {self.user_id}: {e}")
            return False
