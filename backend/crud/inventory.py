"""Inventory ledger.

Stock is never stored. Every figure here is a fold over the append-only
``inventory_transactions`` rows of a factory:

    total_qty   = sum(qty)
    total_value = sum(qty * unit_cost)
    avg cost    = total_value / total_qty   (0 when total_qty <= 0)

Consumption rows carry the average cost at the moment they were written, so
they remove value proportionally and leave the average unchanged.
"""
from typing import Dict, Iterable, List, Optional
import logging

from sqlalchemy.orm import Session

from crud import kv_store
from crud.raw_materials import get_raw_materials
from schemas.inventory import InventoryTransactionCreate, StockLevel, TransactionType
from utils import generate_id, utc_now_iso
from utils.errors import InvalidState

ENTITY = "inventory_transactions"

logger = logging.getLogger(__name__)


def _empty_level(material_id: str) -> dict:
    return {"material_id": material_id, "total_qty": 0.0, "total_value": 0.0, "transactions_count": 0}


def summarize_transactions(transactions: Iterable[dict]) -> Dict[str, dict]:
    """Fold ledger rows into ``{material_id: {total_qty, total_value, transactions_count}}``."""
    stock_levels: Dict[str, dict] = {}
    for tx in transactions:
        material_id = tx["raw_material_id"]
        level = stock_levels.get(material_id)
        if level is None:
            level = stock_levels[material_id] = _empty_level(material_id)
        qty = float(tx.get("qty") or 0)
        level["total_qty"] += qty
        level["total_value"] += qty * float(tx.get("unit_cost") or 0)
        level["transactions_count"] += 1
    return stock_levels


def average_unit_cost(level: Optional[dict]) -> float:
    if not level or level["total_qty"] <= 0:
        return 0.0
    return level["total_value"] / level["total_qty"]


def needs_reorder(total_qty: float, reorder_point: float) -> bool:
    return total_qty <= (reorder_point or 0)


def new_transaction(
    raw_material_id: str,
    tx_type: str,
    qty: float,
    unit_cost: float,
    factory_id: str,
    created_by: Optional[str],
    related_production_order_id: Optional[str] = None,
) -> dict:
    """Build a ledger row without persisting it."""
    return {
        "id": generate_id(),
        "raw_material_id": raw_material_id,
        "tx_type": tx_type,
        "qty": float(qty),
        "unit_cost": float(unit_cost or 0),
        "related_production_order_id": related_production_order_id,
        "factory_id": factory_id,
        "created_by": created_by,
        "timestamp": utc_now_iso(),
    }


def transaction_key(tx: dict) -> str:
    return kv_store.make_key(ENTITY, tx["factory_id"], tx["id"])


def get_transactions(db: Session, factory_id: str, raw_material_id: Optional[str] = None) -> List[dict]:
    transactions = kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))
    if raw_material_id:
        transactions = [tx for tx in transactions if tx.get("raw_material_id") == raw_material_id]
    return transactions


def create_transaction(db: Session, tx: InventoryTransactionCreate, factory_id: str, user_id: str) -> dict:
    """Append one immutable ledger row."""
    qty = tx.qty
    if tx.tx_type == TransactionType.CONSUMPTION:
        qty = -abs(qty)
    elif tx.tx_type == TransactionType.PURCHASE and qty <= 0:
        raise InvalidState("Purchase quantity must be positive")

    db_tx = new_transaction(
        raw_material_id=tx.raw_material_id,
        tx_type=tx.tx_type.value,
        qty=qty,
        unit_cost=tx.unit_cost,
        factory_id=factory_id,
        created_by=user_id,
        related_production_order_id=tx.related_production_order_id,
    )
    return kv_store.set_value(db, transaction_key(db_tx), db_tx)


def get_stock_levels(db: Session, factory_id: str) -> Dict[str, dict]:
    return summarize_transactions(get_transactions(db, factory_id))


def get_inventory(db: Session, factory_id: str) -> List[dict]:
    """Derived stock view: one row per raw material, then ledger-only material ids."""
    stock_levels = get_stock_levels(db, factory_id)
    materials = get_raw_materials(db, factory_id)

    inventory = []
    seen = set()
    for material in materials:
        level = stock_levels.get(material["id"]) or _empty_level(material["id"])
        inventory.append(_stock_row(level, material))
        seen.add(material["id"])

    for material_id, level in stock_levels.items():
        if material_id not in seen:
            inventory.append(_stock_row(level, None))
    return inventory


def _stock_row(level: dict, material: Optional[dict]) -> dict:
    reorder_point = float((material or {}).get("reorder_point") or 0)
    return StockLevel(
        material_id=level["material_id"],
        material_name=(material or {}).get("name"),
        material_unit=(material or {}).get("unit"),
        reorder_point=reorder_point,
        total_qty=level["total_qty"],
        total_value=level["total_value"],
        avg_unit_cost=average_unit_cost(level),
        transactions_count=level["transactions_count"],
        needs_reorder=needs_reorder(level["total_qty"], reorder_point),
    ).model_dump()
