# app/api/dashboard/main.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from ...core.audit import log_action
from ...core.constants import AuditAction
from ...core.users import Principal, require_admin, require_client, require_subadmin
from ...db.engine_sync import get_sync_session
from ...services.dashboard_service import DashboardService
from .models import AdminDashboard, ClientDashboard, SubAdminDashboard

router = APIRouter()


def get_dashboard_service(session: Session = Depends(get_sync_session)) -> DashboardService:
    return DashboardService(session)


@router.get("/dashboard/admin", response_model=AdminDashboard)
def api_admin_dashboard(
    request: Request,
    service: DashboardService = Depends(get_dashboard_service),
    principal: Principal = Depends(require_admin),
):
    """
    Admin overview. Loading it promotes the scheduled payments of the current
    month to pending before the figures are computed.
    """
    data = service.load_admin_dashboard(principal)
    if data["promoted"]:
        log_action(
            AuditAction.PROMOTE,
            "payment",
            data["period"],
            principal=principal,
            request=request,
            details={"promoted": data["promoted"]},
        )
    return data


@router.get("/dashboard/subadmin", response_model=SubAdminDashboard)
def api_subadmin_dashboard(
    service: DashboardService = Depends(get_dashboard_service),
    principal: Principal = Depends(require_subadmin),
):
    return service.load_subadmin_dashboard(principal)


@router.get("/dashboard/client", response_model=ClientDashboard)
def api_client_dashboard(
    service: DashboardService = Depends(get_dashboard_service),
    principal: Principal = Depends(require_client),
):
    try:
        return service.load_client_dashboard(principal)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
