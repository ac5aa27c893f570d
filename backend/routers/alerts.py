from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import alerts as crud_alerts
from utils.auth_utils import get_user_identifier, require_permission
from utils.tenancy import get_factory_id

router = APIRouter(prefix="/alerts", tags=["Alerts"])
logger = logging.getLogger("alerts")


@router.get("")
def read_alerts(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "alerts")),
    factory_id: str = Depends(get_factory_id)
):
    return {"alerts": crud_alerts.get_alerts(db, factory_id)}


@router.delete("/{alert_id}")
def dismiss_alert(
    alert_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("delete", "alerts")),
    factory_id: str = Depends(get_factory_id)
):
    crud_alerts.dismiss_alert(db, alert_id, factory_id)
    logger.info(f"Alert {alert_id} dismissed by user {get_user_identifier(user)} for factory {factory_id}")
    return {"success": True}
