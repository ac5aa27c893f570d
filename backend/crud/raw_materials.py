from typing import List, Optional

from sqlalchemy.orm import Session

from crud import kv_store
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from schemas.raw_materials import RawMaterialCreate, RawMaterialUpdate
from utils import generate_id, utc_now_iso

ENTITY = "raw_materials"


def get_raw_material(db: Session, material_id: str, factory_id: str) -> Optional[dict]:
    return kv_store.get_value(db, kv_store.make_key(ENTITY, factory_id, material_id))


def get_raw_materials(db: Session, factory_id: str) -> List[dict]:
    return kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))


def create_raw_material(db: Session, material: RawMaterialCreate, factory_id: str) -> dict:
    material_id = generate_id()
    db_material = {
        "id": material_id,
        **material.model_dump(),
        "factory_id": factory_id,
        "created_at": utc_now_iso(),
    }
    return kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, material_id), db_material)


def update_raw_material(db: Session, material_id: str, material: RawMaterialUpdate, factory_id: str, changed_by: str) -> Optional[dict]:
    existing = get_raw_material(db, material_id, factory_id)
    if existing is None:
        return None
    updated = {**existing, **material.model_dump(exclude_unset=True), "updated_at": utc_now_iso()}
    kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, material_id), updated)
    create_audit_log(db, factory_id, AuditLogCreate(
        table_name=ENTITY,
        record_id=material_id,
        changed_by=changed_by,
        action='UPDATE',
        old_values=existing,
        new_values=updated
    ))
    return updated


def delete_raw_material(db: Session, material_id: str, factory_id: str, changed_by: str) -> None:
    """Deleting an unknown raw material is a no-op; its ledger rows are kept."""
    existing = get_raw_material(db, material_id, factory_id)
    kv_store.delete_value(db, kv_store.make_key(ENTITY, factory_id, material_id))
    if existing is not None:
        create_audit_log(db, factory_id, AuditLogCreate(
            table_name=ENTITY,
            record_id=material_id,
            changed_by=changed_by,
            action='DELETE',
            old_values=existing,
            new_values=None
        ))
