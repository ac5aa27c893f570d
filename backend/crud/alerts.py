from typing import List, Optional

from sqlalchemy.orm import Session

from crud import kv_store
from schemas.alerts import AlertSeverity, AlertType
from utils import generate_id, utc_now_iso

ENTITY = "alerts"


def get_alerts(db: Session, factory_id: str) -> List[dict]:
    return kv_store.get_by_prefix(db, kv_store.make_prefix(ENTITY, factory_id))


def new_alert(
    factory_id: str,
    message: str,
    alert_type: AlertType = AlertType.LOW_STOCK,
    severity: AlertSeverity = AlertSeverity.HIGH,
    material_id: Optional[str] = None,
) -> dict:
    return {
        "id": generate_id(),
        "type": alert_type.value,
        "message": message,
        "severity": severity.value,
        "material_id": material_id,
        "factory_id": factory_id,
        "created_at": utc_now_iso(),
    }


def _plain_number(value) -> str:
    """Whole numbers print without a trailing .0 or an exponent."""
    value = float(value or 0)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def low_stock_message(material: dict, remaining: float) -> str:
    return (
        f"Low stock alert: {material.get('name')} is at {remaining:.2f} {material.get('unit')} "
        f"(reorder point: {_plain_number(material.get('reorder_point'))})"
    )


def alert_key(alert: dict) -> str:
    return kv_store.make_key(ENTITY, alert["factory_id"], alert["id"])


def dismiss_alert(db: Session, alert_id: str, factory_id: str) -> None:
    """Dismissing twice, or dismissing an unknown id, is not an error."""
    kv_store.delete_value(db, kv_store.make_key(ENTITY, factory_id, alert_id))
