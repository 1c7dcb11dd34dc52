# app/api/admin/main.py
"""
Admin-only account management: clients, subadmins and termination.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.constants import AuditAction, UserRole
from ...core.users import Principal, require_admin
from ...db.engine_sync import get_sync_session
from ...services.user_service import UserService
from ..clients.models import ClientCreate, CreatedUser, DeletedUser
from .models import SubAdmin, SubAdminCreate, SubAdminStatus

logger = logging.getLogger(__name__)

router = APIRouter()


def get_user_service(session: Session = Depends(get_sync_session)) -> UserService:
    return UserService(session)


@router.post("/admin/create-client", response_model=CreatedUser, status_code=status.HTTP_201_CREATED)
def api_admin_create_client(
    client: ClientCreate,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    """Create a client. It must be assigned to an existing subadmin."""
    try:
        new_client = service.create_client(
            client.email,
            client.password,
            client.name,
            created_by=principal.id,
            target_amount=client.target_amount,
            fixed_amount=client.fixed_amount,
            assigned_subadmin_id=client.assigned_subadmin_id,
            require_subadmin=True,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    log_action(
        AuditAction.CREATE,
        "client",
        str(new_client.id),
        principal=principal,
        request=request,
        details={"assigned_subadmin_id": str(client.assigned_subadmin_id)},
    )
    return CreatedUser(uid=new_client.id)


@router.post("/admin/create-subadmin", response_model=CreatedUser, status_code=status.HTTP_201_CREATED)
def api_admin_create_subadmin(
    subadmin: SubAdminCreate,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    try:
        new_subadmin = service.create_subadmin(
            subadmin.email,
            subadmin.password,
            subadmin.name,
            created_by=principal.id,
            client_ids=subadmin.client_ids,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    log_action(
        AuditAction.CREATE,
        "subadmin",
        str(new_subadmin.id),
        principal=principal,
        request=request,
        details={"client_ids": [str(cid) for cid in subadmin.client_ids]},
    )
    return CreatedUser(uid=new_subadmin.id)


# --- SubAdmin Endpoints ---


@router.get("/subadmins", response_model=list[SubAdmin])
def api_get_subadmins(
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    return service.get_subadmins()


@router.put("/subadmins/{subadmin_id}/status", response_model=SubAdmin)
def api_set_subadmin_status(
    subadmin_id: uuid.UUID,
    body: SubAdminStatus,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    """Terminate (or reinstate) a subadmin. Terminated subadmins cannot create requests."""
    try:
        subadmin = service.set_terminated(subadmin_id, body.terminated)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    action = AuditAction.TERMINATE if body.terminated else AuditAction.UPDATE
    log_action(
        action,
        "subadmin",
        str(subadmin_id),
        principal=principal,
        request=request,
        details={"terminated": body.terminated},
    )
    return service.get_subadmin(subadmin.id)


@router.delete("/subadmins/{subadmin_id}", response_model=DeletedUser)
def api_delete_subadmin(
    subadmin_id: uuid.UUID,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    try:
        result = service.delete_user(subadmin_id, role=UserRole.SUBADMIN.value)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    log_action(
        AuditAction.DELETE,
        "subadmin",
        str(subadmin_id),
        principal=principal,
        request=request,
        details={"unassigned_clients": result["unassigned_clients"]},
    )
    return DeletedUser(**result)
