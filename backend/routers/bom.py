from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import bom as crud_bom
from schemas.bom import BOMEntryCreate
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(prefix="/bom", tags=["Bill of Materials"])
logger = logging.getLogger("bom")


@router.get("")
def read_bom_entries(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "bom")),
    factory_id: str = Depends(get_factory_id)
):
    return {"boms": crud_bom.get_bom_entries(db, factory_id)}


@router.get("/product/{product_id}")
def read_product_bom(
    product_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "bom")),
    factory_id: str = Depends(get_factory_id)
):
    return {"boms": crud_bom.resolve(db, product_id, factory_id)}


@router.post("")
def create_bom_entry(
    entry: BOMEntryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "bom")),
    factory_id: str = Depends(get_factory_id)
):
    bom = crud_bom.create_bom_entry(db, entry, factory_id)
    logger.info(
        f"BOM entry {bom['id']} ({entry.qty_per_unit} of {entry.raw_material_id} per {entry.product_id}) "
        f"created by user {get_user_identifier(user)} for factory {factory_id}"
    )
    return {"success": True, "bom": bom}


@router.delete("/{bom_id}")
def delete_bom_entry(
    bom_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("delete", "bom")),
    factory_id: str = Depends(get_factory_id)
):
    crud_bom.delete_bom_entry(db, bom_id, factory_id, changed_by=get_user_identifier(user))
    logger.info(f"BOM entry {bom_id} deleted by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True}
