from typing import List, Optional

from sqlalchemy.orm import Session

from crud import kv_store
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from schemas.products import ProductCreate, ProductUpdate
from utils import generate_id, utc_now_iso

ENTITY = "products"


def get_product(db: Session, product_id: str, factory_id: str) -> Optional[dict]:
    return kv_store.get_value(db, kv_store.make_key(ENTITY, factory_id, product_id))


def get_products(db: Session, factory_id: str) -> List[dict]:
    return kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))


def create_product(db: Session, product: ProductCreate, factory_id: str) -> dict:
    product_id = generate_id()
    db_product = {
        "id": product_id,
        **product.model_dump(),
        "factory_id": factory_id,
        "created_at": utc_now_iso(),
    }
    return kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, product_id), db_product)


def update_product(db: Session, product_id: str, product: ProductUpdate, factory_id: str, changed_by: str) -> Optional[dict]:
    existing = get_product(db, product_id, factory_id)
    if existing is None:
        return None
    updated = {**existing, **product.model_dump(exclude_unset=True), "updated_at": utc_now_iso()}
    kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, product_id), updated)
    create_audit_log(db, factory_id, AuditLogCreate(
        table_name=ENTITY,
        record_id=product_id,
        changed_by=changed_by,
        action='UPDATE',
        old_values=existing,
        new_values=updated
    ))
    return updated


def delete_product(db: Session, product_id: str, factory_id: str, changed_by: str) -> None:
    """Deleting an unknown product is a no-op; BOM rows pointing at it are left in place."""
    existing = get_product(db, product_id, factory_id)
    kv_store.delete_value(db, kv_store.make_key(ENTITY, factory_id, product_id))
    if existing is not None:
        create_audit_log(db, factory_id, AuditLogCreate(
            table_name=ENTITY,
            record_id=product_id,
            changed_by=changed_by,
            action='DELETE',
            old_values=existing,
            new_values=None
        ))
