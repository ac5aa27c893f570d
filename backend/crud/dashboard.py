from sqlalchemy.orm import Session

from crud import downtime as crud_downtime
from crud import inventory as crud_inventory
from crud import production_orders as crud_orders
from crud.raw_materials import get_raw_materials
from schemas.production_orders import OrderStatus
from schemas.reports import DashboardSummary
from utils import utc_now

RECENT_ORDERS_LIMIT = 5


def get_dashboard(db: Session, factory_id: str) -> dict:
    """
    Recompute the dashboard from scratch.

    "Today" is the current UTC date matched as a prefix of ``actual_end``.
    Production and downtime costs are all-time totals. Recent orders follow
    storage insertion order, newest first.
    """
    orders = crud_orders.get_orders(db, factory_id)
    materials = get_raw_materials(db, factory_id)
    stock_levels = crud_inventory.get_stock_levels(db, factory_id)
    downtime_events = crud_downtime.get_downtime_events(db, factory_id)
    material_usage = crud_orders.get_material_usage(db, factory_id)

    today = utc_now().date().isoformat()
    today_orders = [o for o in orders if o.get("actual_end") and o["actual_end"].startswith(today)]
    total_produced_today = sum(float(o.get("actual_produced_qty") or 0) for o in today_orders)

    stock_alerts = []
    for material in materials:
        current_stock = stock_levels.get(material["id"], {}).get("total_qty", 0.0)
        if crud_inventory.needs_reorder(current_stock, float(material.get("reorder_point") or 0)):
            stock_alerts.append({**material, "current_stock": current_stock})

    total_production_cost = sum(float(u["qty_used"]) * float(u["unit_cost"]) for u in material_usage)
    total_downtime_cost = sum(
        crud_downtime.downtime_cost(e.get("start_time"), e.get("end_time")) for e in downtime_events
    )
    completed_orders = [o for o in orders if o.get("status") == OrderStatus.COMPLETED.value]

    summary = DashboardSummary(
        total_produced_today=total_produced_today,
        orders_today=len(today_orders),
        low_stock_items=len(stock_alerts),
        total_production_cost=total_production_cost,
        total_downtime_cost=total_downtime_cost,
        completed_orders_count=len(completed_orders),
    )
    return {
        "summary": summary.model_dump(),
        "recent_orders": list(reversed(orders[-RECENT_ORDERS_LIMIT:])),
        "stock_alerts": stock_alerts,
    }
