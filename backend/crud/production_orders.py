from typing import Dict, List, Optional
import logging
import threading

from sqlalchemy.orm import Session

from crud import kv_store
from crud import alerts as crud_alerts
from crud import bom as crud_bom
from crud import inventory as crud_inventory
from crud.raw_materials import get_raw_materials
from schemas.inventory import TransactionType
from schemas.production_orders import OrderStatus, ProductionOrderCreate
from utils import generate_id, utc_now_iso
from utils.errors import AlreadyCompleted, InsufficientStock, InvalidState, NotFound

ENTITY = "production_orders"
USAGE_ENTITY = "production_material_usage"

logger = logging.getLogger(__name__)

# One lock per factory: a completion (stock check plus consumption writes) must
# not interleave with another completion or a start of the same factory.
_factory_locks: Dict[str, threading.Lock] = {}
_factory_locks_guard = threading.Lock()


def _completion_lock(factory_id: str) -> threading.Lock:
    with _factory_locks_guard:
        lock = _factory_locks.get(factory_id)
        if lock is None:
            lock = _factory_locks[factory_id] = threading.Lock()
        return lock


def order_key(factory_id: str, order_id: str) -> str:
    return kv_store.make_key(ENTITY, factory_id, order_id)


def get_order(db: Session, order_id: str, factory_id: str) -> Optional[dict]:
    return kv_store.get_value(db, order_key(factory_id, order_id))


def get_orders(db: Session, factory_id: str) -> List[dict]:
    """Orders in insertion order."""
    return kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))


def get_material_usage(db: Session, factory_id: str, order_id: Optional[str] = None) -> List[dict]:
    usage = kv_store.get_by_prefix(db, kv_store.make_prefix(USAGE_ENTITY, factory_id))
    if order_id:
        usage = [u for u in usage if u.get("production_order_id") == order_id]
    return usage


def create_order(db: Session, order: ProductionOrderCreate, factory_id: str, user_id: str) -> dict:
    order_id = generate_id()
    db_order = {
        "id": order_id,
        "product_id": order.product_id,
        "target_qty": float(order.target_qty),
        "actual_produced_qty": 0,
        "status": OrderStatus.SCHEDULED.value,
        "scheduled_start": order.scheduled_start,
        "actual_start": None,
        "actual_end": None,
        "factory_id": factory_id,
        "created_by": user_id,
        "created_at": utc_now_iso(),
    }
    return kv_store.set_value(db, order_key(factory_id, order_id), db_order)


def start_order(db: Session, order_id: str, factory_id: str) -> dict:
    """scheduled -> in_progress. Serialized with completions of the same factory."""
    with _completion_lock(factory_id):
        order = get_order(db, order_id, factory_id)
        if order is None:
            raise NotFound("Order not found")
        if order["status"] != OrderStatus.SCHEDULED.value:
            raise InvalidState("Order already started or completed")

        now = utc_now_iso()
        order["status"] = OrderStatus.IN_PROGRESS.value
        order["actual_start"] = now
        order["updated_at"] = now
        return kv_store.set_value(db, order_key(factory_id, order_id), order)


def complete_order(db: Session, order_id: str, actual_produced_qty: float, factory_id: str, user_id: str) -> dict:
    """
    Complete an order from scheduled or in_progress and consume its materials.

    Every BOM material is checked against the ledger before anything is
    written; a single shortfall raises InsufficientStock and leaves the store
    untouched. Consumption rows, usage rows, the order update and low-stock
    alerts are then written in one batch.
    """
    with _completion_lock(factory_id):
        order = get_order(db, order_id, factory_id)
        if order is None:
            raise NotFound("Order not found")
        if order["status"] == OrderStatus.COMPLETED.value:
            raise AlreadyCompleted(order_id)

        produced = float(actual_produced_qty)
        required = crud_bom.required_materials(crud_bom.resolve(db, order["product_id"], factory_id), produced)
        stock_levels = crud_inventory.get_stock_levels(db, factory_id)

        for material_id, required_qty in required.items():
            available = stock_levels.get(material_id, {}).get("total_qty", 0.0)
            if available < required_qty:
                logger.info(
                    f"Completion of order {order_id} rejected: material {material_id} "
                    f"needs {required_qty}, has {available}"
                )
                raise InsufficientStock(material_id, required_qty, available)

        now = utc_now_iso()
        writes = []
        for material_id, required_qty in required.items():
            unit_cost = crud_inventory.average_unit_cost(stock_levels.get(material_id))
            tx = crud_inventory.new_transaction(
                raw_material_id=material_id,
                tx_type=TransactionType.CONSUMPTION.value,
                qty=-required_qty,
                unit_cost=unit_cost,
                factory_id=factory_id,
                created_by=user_id,
                related_production_order_id=order_id,
            )
            writes.append((crud_inventory.transaction_key(tx), tx))

            usage_id = generate_id()
            usage = {
                "id": usage_id,
                "production_order_id": order_id,
                "raw_material_id": material_id,
                "qty_used": required_qty,
                "unit_cost": unit_cost,
                "factory_id": factory_id,
                "created_at": now,
            }
            writes.append((kv_store.make_key(USAGE_ENTITY, factory_id, usage_id), usage))

        order = {
            **order,
            "status": OrderStatus.COMPLETED.value,
            "actual_produced_qty": produced,
            "actual_end": now,
            "updated_at": now,
        }
        writes.append((order_key(factory_id, order_id), order))

        emitted = 0
        for material in get_raw_materials(db, factory_id):
            available = stock_levels.get(material["id"], {}).get("total_qty", 0.0)
            remaining = available - required.get(material["id"], 0.0)
            if remaining <= float(material.get("reorder_point") or 0):
                alert = crud_alerts.new_alert(
                    factory_id=factory_id,
                    message=crud_alerts.low_stock_message(material, remaining),
                    material_id=material["id"],
                )
                writes.append((crud_alerts.alert_key(alert), alert))
                emitted += 1

        kv_store.set_many(db, writes)

    logger.info(
        f"Order {order_id} completed with {produced} units: "
        f"{len(required)} materials consumed, {emitted} low-stock alerts"
    )
    return order
