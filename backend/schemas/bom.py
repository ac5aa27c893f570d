from pydantic import BaseModel, Field


class BOMEntryCreate(BaseModel):
    product_id: str
    raw_material_id: str
    qty_per_unit: float = Field(..., gt=0)
