from .db_session import insert_or_fetch, safe_commit
from .request_payload import parse_json

__all__ = ['insert_or_fetch', 'safe_commit', 'parse_json']
