"""Key-value store adapter.

Every entity lives in the ``kv_store`` table as a JSON document. This module
is the only place that touches that table; the rest of the code speaks in
keys and plain dicts.
"""
from typing import Iterable, List, Optional, Tuple
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from models.kv_store import KVStore

logger = logging.getLogger(__name__)


def make_key(entity: str, factory_id: str, entity_id: str) -> str:
    return f"{entity}:{factory_id}:{entity_id}"


def make_prefix(entity: str, factory_id: str) -> str:
    return f"{entity}:{factory_id}:"


def _upsert(db: Session, key: str, value: dict):
    row = db.query(KVStore).filter(KVStore.key == key).first()
    if row:
        row.value = dict(value)
        flag_modified(row, "value")
    else:
        db.add(KVStore(key=key, value=dict(value)))


def get_value(db: Session, key: str) -> Optional[dict]:
    row = db.query(KVStore).filter(KVStore.key == key).first()
    return dict(row.value) if row else None


def set_value(db: Session, key: str, value: dict) -> dict:
    try:
        _upsert(db, key, value)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return value


def delete_value(db: Session, key: str) -> None:
    """Delete a key. Deleting a missing key is a no-op."""
    try:
        db.query(KVStore).filter(KVStore.key == key).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_by_prefix(db: Session, prefix: str) -> List[dict]:
    """Return every value whose key starts with ``prefix``, in insertion order."""
    rows = (
        db.query(KVStore)
        .filter(KVStore.key.startswith(prefix, autoescape=True))
        .order_by(KVStore.id)
        .all()
    )
    return [dict(row.value) for row in rows]


def set_many(db: Session, entries: Iterable[Tuple[str, dict]]) -> int:
    """Write several keys in a single transaction: either all land or none do."""
    count = 0
    try:
        for key, value in entries:
            _upsert(db, key, value)
            db.flush()
            count += 1
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Batch write of %s keys rolled back", count)
        raise
    return count
