from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import production_orders as crud_orders
from schemas.production_orders import ProductionOrderComplete, ProductionOrderCreate
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(prefix="/production-orders", tags=["Production Orders"])
logger = logging.getLogger("production_orders")


@router.get("")
def read_production_orders(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "production_orders")),
    factory_id: str = Depends(get_factory_id)
):
    return {"orders": crud_orders.get_orders(db, factory_id)}


@router.get("/{order_id}/material-usage")
def read_order_material_usage(
    order_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "production_orders")),
    factory_id: str = Depends(get_factory_id)
):
    return {"usage": crud_orders.get_material_usage(db, factory_id, order_id=order_id)}


@router.post("")
def create_production_order(
    order: ProductionOrderCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "production_orders")),
    factory_id: str = Depends(get_factory_id)
):
    new_order = crud_orders.create_order(db, order, factory_id, user_id=user["id"])
    logger.info(f"Production order {new_order['id']} scheduled by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "order": new_order}


@router.put("/{order_id}/start")
def start_production_order(
    order_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("start", "production_orders")),
    factory_id: str = Depends(get_factory_id)
):
    order = crud_orders.start_order(db, order_id, factory_id)
    logger.info(f"Production order {order_id} started by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "order": order}


@router.put("/{order_id}/complete")
def complete_production_order(
    order_id: str,
    body: ProductionOrderComplete,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("complete", "production_orders")),
    factory_id: str = Depends(get_factory_id)
):
    order = crud_orders.complete_order(db, order_id, body.actual_produced_qty, factory_id, user_id=user["id"])
    logger.info(f"Production order {order_id} completed by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "order": order}
