from typing import List, Optional

from sqlalchemy.orm import Session

from crud import kv_store
from schemas.audit_log import AuditLogCreate
from utils import generate_id, utc_now_iso

ENTITY = "audit_log"


def create_audit_log(db: Session, factory_id: str, log_entry: AuditLogCreate) -> dict:
    entry_id = generate_id()
    db_log_entry = {
        "id": entry_id,
        **log_entry.model_dump(),
        "factory_id": factory_id,
        "changed_at": utc_now_iso(),
    }
    kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, entry_id), db_log_entry)
    return db_log_entry


def get_audit_logs(db: Session, factory_id: str, table_name: Optional[str] = None) -> List[dict]:
    entries = kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))
    if table_name:
        entries = [e for e in entries if e.get("table_name") == table_name]
    return entries
