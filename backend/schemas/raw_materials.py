from pydantic import BaseModel, Field
from typing import Optional


class RawMaterialBase(BaseModel):
    name: str
    unit: str  # e.g., "kg", "m", "pcs", "liter"
    # Stock at or below this level raises a low-stock alert
    reorder_point: float = Field(0, ge=0)


class RawMaterialCreate(RawMaterialBase):
    pass


class RawMaterialUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None
    reorder_point: Optional[float] = Field(None, ge=0)
