"""Utility helpers for working with the SQLAlchemy session.

:func:`safe_commit` commits and, on failure, rolls the session back before
re-raising so the session stays usable for the caller's error handling.
Lock contention on SQLite is absorbed by the ``busy_timeout`` pragma set in
:mod:`lexistack_app.db_instance`; a commit is never retried here because the
rollback has already discarded the objects that were pending.

:func:`insert_or_fetch` is the single implementation of the
"insert, and on a unique conflict fetch the existing row" rule used for
words, collections, collection entries, user word-list rows and practice
outcome rows.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.session import Session


def safe_commit(session: Session) -> None:
    """Commit the current transaction, rolling back if the commit fails.

    Raises:
        SQLAlchemyError: Re-raised after the rollback; nothing pending at the
            time of the failure has been written.
    """

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


def _find(session: Session, model: Type[Any], natural_key: Mapping[str, Any]):
    """Return the row of ``model`` matching every column in ``natural_key``."""

    return session.query(model).filter_by(**natural_key).first()


def insert_or_fetch(
    session: Session,
    model: Type[Any],
    natural_key: Mapping[str, Any],
    defaults: Optional[Dict[str, Any]] = None,
) -> Tuple[Any, bool]:
    """Return the row identified by ``natural_key``, inserting it if missing.

    The lookup runs first. When another writer inserts the same natural key
    between the lookup and our commit, the unique constraint rejects our row;
    the transaction is rolled back and the winner's row is returned instead.

    Returns:
        ``(instance, created)`` where ``created`` tells whether this call
        inserted the row.

    Raises:
        IntegrityError: If the insert failed and no row with the natural key
            exists afterwards (the conflict was on some other constraint).
    """

    existing = _find(session, model, natural_key)
    if existing is not None:
        return existing, False

    values = dict(defaults or {})
    values.update(natural_key)
    instance = model(**values)
    session.add(instance)
    try:
        safe_commit(session)
        return instance, True
    except IntegrityError:
        session.rollback()
        existing = _find(session, model, natural_key)
        if existing is None:
            raise
        return existing, False
