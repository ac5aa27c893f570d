from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import raw_materials as crud_raw_materials
from schemas.raw_materials import RawMaterialCreate, RawMaterialUpdate
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(prefix="/raw-materials", tags=["Raw Materials"])
logger = logging.getLogger("raw_materials")


@router.get("")
def read_raw_materials(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "raw_materials")),
    factory_id: str = Depends(get_factory_id)
):
    return {"materials": crud_raw_materials.get_raw_materials(db, factory_id)}


@router.post("")
def create_raw_material(
    material: RawMaterialCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "raw_materials")),
    factory_id: str = Depends(get_factory_id)
):
    new_material = crud_raw_materials.create_raw_material(db, material, factory_id)
    logger.info(f"Raw material '{new_material['name']}' created by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "material": new_material}


@router.put("/{material_id}")
def update_raw_material(
    material_id: str,
    material: RawMaterialUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("update", "raw_materials")),
    factory_id: str = Depends(get_factory_id)
):
    updated = crud_raw_materials.update_raw_material(db, material_id, material, factory_id, changed_by=get_user_identifier(user))
    if updated is None:
        raise HTTPException(status_code=404, detail="Material not found")
    logger.info(f"Raw material (ID: {material_id}) updated by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "material": updated}


@router.delete("/{material_id}")
def delete_raw_material(
    material_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("delete", "raw_materials")),
    factory_id: str = Depends(get_factory_id)
):
    crud_raw_materials.delete_raw_material(db, material_id, factory_id, changed_by=get_user_identifier(user))
    logger.info(f"Raw material (ID: {material_id}) deleted by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True}
