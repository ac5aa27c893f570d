from io import BytesIO
from typing import List

import pandas as pd
from sqlalchemy.orm import Session

from crud import production_orders as crud_orders
from crud.products import get_products
from schemas.production_orders import OrderStatus
from schemas.reports import CostReport, CostReportRow, CostReportTotals

EXPORT_COLUMNS = {
    "order_id": "Order",
    "product_name": "Product",
    "produced_qty": "Produced Qty",
    "material_cost": "Material Cost",
    "cost_per_unit": "Cost / Unit",
    "selling_price": "Selling Price",
    "revenue": "Revenue",
    "profit": "Profit",
    "margin_percent": "Margin %",
    "completed_at": "Completed At",
}


def build_cost_report_row(order: dict, usages: List[dict], product: dict) -> CostReportRow:
    material_cost = sum(float(u["qty_used"]) * float(u["unit_cost"]) for u in usages)
    produced_qty = float(order.get("actual_produced_qty") or 0)
    selling_price = float((product or {}).get("selling_price") or 0)

    cost_per_unit = material_cost / produced_qty if produced_qty > 0 else 0.0
    revenue = produced_qty * selling_price
    profit = revenue - material_cost
    margin_percent = profit / revenue * 100 if revenue > 0 else 0.0

    return CostReportRow(
        order_id=order["id"],
        product_name=(product or {}).get("name"),
        produced_qty=produced_qty,
        material_cost=material_cost,
        cost_per_unit=cost_per_unit,
        selling_price=selling_price,
        revenue=revenue,
        profit=profit,
        margin_percent=margin_percent,
        completed_at=order.get("actual_end"),
    )


def get_cost_report(db: Session, factory_id: str) -> CostReport:
    """One row per completed order, recomputed from the stored usage rows."""
    orders = crud_orders.get_orders(db, factory_id)
    material_usage = crud_orders.get_material_usage(db, factory_id)
    products = {p["id"]: p for p in get_products(db, factory_id)}

    usage_by_order = {}
    for usage in material_usage:
        usage_by_order.setdefault(usage["production_order_id"], []).append(usage)

    rows = [
        build_cost_report_row(order, usage_by_order.get(order["id"], []), products.get(order.get("product_id")))
        for order in orders
        if order.get("status") == OrderStatus.COMPLETED.value
    ]

    totals = CostReportTotals(
        total_revenue=sum(r.revenue for r in rows),
        total_material_cost=sum(r.material_cost for r in rows),
        total_profit=sum(r.profit for r in rows),
        average_margin_percent=sum(r.margin_percent for r in rows) / len(rows) if rows else 0.0,
    )
    return CostReport(cost_reports=rows, totals=totals)


def export_cost_report(db: Session, factory_id: str) -> BytesIO:
    report = get_cost_report(db, factory_id)
    df = pd.DataFrame([row.model_dump() for row in report.cost_reports], columns=list(EXPORT_COLUMNS))
    df = df.rename(columns=EXPORT_COLUMNS)

    excel_file = BytesIO()
    df.to_excel(excel_file, index=False, sheet_name='Cost Report', engine='openpyxl')
    excel_file.seek(0)
    return excel_file
