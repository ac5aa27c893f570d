from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DowntimeEventCreate(BaseModel):
    production_order_id: Optional[str] = None
    reason: str
    start_time: datetime
    end_time: Optional[datetime] = None  # None while the line is still down
