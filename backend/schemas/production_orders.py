from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ProductionOrderCreate(BaseModel):
    product_id: str
    target_qty: float = Field(..., gt=0)
    scheduled_start: Optional[str] = None


class ProductionOrderComplete(BaseModel):
    actual_produced_qty: float = Field(..., ge=0)
