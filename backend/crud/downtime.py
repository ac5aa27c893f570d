from datetime import datetime
from typing import List, Optional, Union

from dateutil import parser
from sqlalchemy.orm import Session
import pytz

from crud import kv_store
from schemas.downtime import DowntimeEventCreate
from utils import generate_id, utc_now_iso

ENTITY = "downtime_events"

# Fixed, system-wide cost of one hour of downtime in factory currency units
DOWNTIME_COST_PER_HOUR = 100


def _as_datetime(value: Union[str, datetime]) -> datetime:
    if isinstance(value, str):
        value = parser.isoparse(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=pytz.utc)
    return value


def duration_hours(start: Union[str, datetime, None], end: Union[str, datetime, None]) -> float:
    """Hours between start and end; 0 when either end is open. Negative if end precedes start."""
    if not start or not end:
        return 0.0
    return (_as_datetime(end) - _as_datetime(start)).total_seconds() / 3600


def downtime_cost(start: Union[str, datetime, None], end: Union[str, datetime, None]) -> float:
    return duration_hours(start, end) * DOWNTIME_COST_PER_HOUR


def with_cost(event: dict) -> dict:
    hours = duration_hours(event.get("start_time"), event.get("end_time"))
    return {**event, "duration_hours": hours, "cost": hours * DOWNTIME_COST_PER_HOUR}


def get_downtime_events(db: Session, factory_id: str) -> List[dict]:
    return kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))


def create_downtime_event(db: Session, event: DowntimeEventCreate, factory_id: str, user_id: Optional[str]) -> dict:
    event_id = generate_id()
    db_event = {
        "id": event_id,
        "production_order_id": event.production_order_id,
        "reason": event.reason,
        "start_time": event.start_time.isoformat(),
        "end_time": event.end_time.isoformat() if event.end_time else None,
        "factory_id": factory_id,
        "created_by": user_id,
        "created_at": utc_now_iso(),
    }
    return kv_store.set_value(db, kv_store.make_key(ENTITY, factory_id, event_id), db_event)
