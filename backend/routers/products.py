from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import products as crud_products
from schemas.products import ProductCreate, ProductUpdate
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger("products")


@router.get("")
def read_products(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "products")),
    factory_id: str = Depends(get_factory_id)
):
    return {"products": crud_products.get_products(db, factory_id)}


@router.post("")
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "products")),
    factory_id: str = Depends(get_factory_id)
):
    new_product = crud_products.create_product(db, product, factory_id)
    logger.info(f"Product '{new_product['name']}' created by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "product": new_product}


@router.put("/{product_id}")
def update_product(
    product_id: str,
    product: ProductUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("update", "products")),
    factory_id: str = Depends(get_factory_id)
):
    updated = crud_products.update_product(db, product_id, product, factory_id, changed_by=get_user_identifier(user))
    if updated is None:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Product (ID: {product_id}) updated by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "product": updated}


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("delete", "products")),
    factory_id: str = Depends(get_factory_id)
):
    crud_products.delete_product(db, product_id, factory_id, changed_by=get_user_identifier(user))
    logger.info(f"Product (ID: {product_id}) deleted by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True}
