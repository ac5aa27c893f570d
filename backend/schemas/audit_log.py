from pydantic import BaseModel
from typing import Optional, Dict, Any


class AuditLogCreate(BaseModel):
    table_name: str
    record_id: str
    changed_by: str
    action: str  # 'UPDATE' or 'DELETE'
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
