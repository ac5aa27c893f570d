from pydantic import BaseModel, Field
from typing import Optional


class ProductBase(BaseModel):
    name: str
    unit: str  # e.g., "pcs", "kg"
    selling_price: float = Field(0, ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None
    selling_price: Optional[float] = Field(None, ge=0)
