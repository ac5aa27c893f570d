from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from crud import kv_store
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from schemas.bom import BOMEntryCreate
from utils import generate_id, utc_now_iso

ENTITY = "bom"


def get_bom_entries(db: Session, factory_id: str) -> List[dict]:
    return kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))


def get_bom_entry(db: Session, bom_id: str, factory_id: str) -> Optional[dict]:
    return kv_store.get_value(db, kv_store.make_key(ENTITY, factory_id, bom_id))


def resolve(db: Session, product_id: str, factory_id: str) -> List[dict]:
    """All BOM entries of a product. Referenced product/material ids are not checked."""
    return [entry for entry in get_bom_entries(db, factory_id) if entry.get("product_id") == product_id]


def required_materials(bom_entries: List[dict], produced_qty: float) -> Dict[str, float]:
    """Material id -> quantity needed to produce ``produced_qty`` units."""
    required = defaultdict(float)
    for entry in bom_entries:
        required[entry["raw_material_id"]] += float(entry["qty_per_unit"]) * float(produced_qty)
    return dict(required)


def create_bom_entry(db: Session, entry: BOMEntryCreate, factory_id: str) -> dict:
    bom_id = generate_id()
    db_entry = {
        "id": bom_id,
        **entry.model_dump(),
        "factory_id": factory_id,
        "created_at": utc_now_iso(),
    }
    return kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, bom_id), db_entry)


def delete_bom_entry(db: Session, bom_id: str, factory_id: str, changed_by: str) -> None:
    existing = get_bom_entry(db, bom_id, factory_id)
    kv_store.delete_value(db, kv_store.make_key(ENTITY, factory_id, bom_id))
    if existing is not None:
        create_audit_log(db, factory_id, AuditLogCreate(
            table_name=ENTITY,
            record_id=bom_id,
            changed_by=changed_by,
            action='DELETE',
            old_values=existing,
            new_values=None
        ))
