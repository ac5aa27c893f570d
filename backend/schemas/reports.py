from typing import List, Optional

from pydantic import BaseModel


class DashboardSummary(BaseModel):
    total_produced_today: float
    orders_today: int
    low_stock_items: int
    total_production_cost: float
    total_downtime_cost: float
    completed_orders_count: int


class CostReportRow(BaseModel):
    order_id: str
    product_name: Optional[str] = None
    produced_qty: float
    material_cost: float
    cost_per_unit: float
    selling_price: float
    revenue: float
    profit: float
    margin_percent: float
    completed_at: Optional[str] = None


class CostReportTotals(BaseModel):
    total_revenue: float
    total_material_cost: float
    total_profit: float
    average_margin_percent: float


class CostReport(BaseModel):
    cost_reports: List[CostReportRow]
    totals: CostReportTotals
