from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    PURCHASE = "purchase"
    ADJUSTMENT = "adjustment"
    CONSUMPTION = "consumption"


class InventoryTransactionCreate(BaseModel):
    raw_material_id: str
    tx_type: TransactionType
    qty: float  # signed; consumption is always stored negative
    unit_cost: float = Field(0, ge=0)
    related_production_order_id: Optional[str] = None


class StockLevel(BaseModel):
    material_id: str
    material_name: Optional[str] = None
    material_unit: Optional[str] = None
    reorder_point: float = 0
    total_qty: float = 0
    total_value: float = 0
    avg_unit_cost: float = 0
    transactions_count: int = 0
    needs_reorder: bool = False
