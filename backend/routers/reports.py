from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from database import get_db
from crud import audit_log as crud_audit_log
from crud import cost_reports as crud_cost_reports
from crud import dashboard as crud_dashboard
from utils import utc_now
from utils.auth_utils import require_permission
from utils.tenancy import get_factory_id

router = APIRouter(tags=["Reports"])


@router.get("/dashboard")
def get_dashboard(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "dashboard")),
    factory_id: str = Depends(get_factory_id)
):
    return {"success": True, **crud_dashboard.get_dashboard(db, factory_id)}


@router.get("/cost-reports")
def get_cost_reports(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cost_reports")),
    factory_id: str = Depends(get_factory_id)
):
    report = crud_cost_reports.get_cost_report(db, factory_id)
    return {"success": True, **report.model_dump()}


@router.get("/cost-reports/export")
def export_cost_reports(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "cost_reports")),
    factory_id: str = Depends(get_factory_id)
):
    """Cost report rows as an Excel download."""
    excel_file = crud_cost_reports.export_cost_report(db, factory_id)
    filename = f"cost_report_{utc_now().strftime('%Y-%m-%d')}.xlsx"
    headers = {
        'Content-Disposition': f'attachment; filename="{filename}"'
    }
    return StreamingResponse(excel_file, media_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', headers=headers)


@router.get("/audit-log")
def get_audit_log(
    table_name: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "audit_log")),
    factory_id: str = Depends(get_factory_id)
):
    return {"entries": crud_audit_log.get_audit_logs(db, factory_id, table_name=table_name)}
