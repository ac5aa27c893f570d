from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import inventory as crud_inventory
from schemas.inventory import InventoryTransactionCreate
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(tags=["Inventory"])
logger = logging.getLogger("inventory")


@router.get("/inventory")
def read_inventory(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "inventory")),
    factory_id: str = Depends(get_factory_id)
):
    """Current stock and weighted-average cost per material, derived from the full ledger."""
    return {"inventory": crud_inventory.get_inventory(db, factory_id)}


@router.get("/inventory-transactions")
def read_inventory_transactions(
    raw_material_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "inventory_transactions")),
    factory_id: str = Depends(get_factory_id)
):
    return {"transactions": crud_inventory.get_transactions(db, factory_id, raw_material_id=raw_material_id)}


@router.post("/inventory-transactions")
def create_inventory_transaction(
    tx: InventoryTransactionCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "inventory_transactions")),
    factory_id: str = Depends(get_factory_id)
):
    transaction = crud_inventory.create_transaction(db, tx, factory_id, user_id=user["id"])
    logger.info(
        f"{transaction['tx_type']} of {transaction['qty']} @ {transaction['unit_cost']} for material "
        f"{transaction['raw_material_id']} recorded by user {get_user_identifier(user)} for factory {factory_id}"
    )
    return {"success": True, "transaction": transaction}
