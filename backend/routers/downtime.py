from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import downtime as crud_downtime
from schemas.downtime import DowntimeEventCreate
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(prefix="/downtime-events", tags=["Downtime"])
logger = logging.getLogger("downtime")


@router.get("")
def read_downtime_events(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "downtime_events")),
    factory_id: str = Depends(get_factory_id)
):
    """Events with ``duration_hours`` and ``cost`` computed at read time."""
    events = crud_downtime.get_downtime_events(db, factory_id)
    return {"events": [crud_downtime.with_cost(event) for event in events]}


@router.post("")
def create_downtime_event(
    event: DowntimeEventCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "downtime_events")),
    factory_id: str = Depends(get_factory_id)
):
    new_event = crud_downtime.create_downtime_event(db, event, factory_id, user_id=user["id"])
    logger.info(f"Downtime '{event.reason}' logged by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True, "event": new_event}
