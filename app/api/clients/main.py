import uuid
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.constants import AuditAction
from ...core.users import Principal, require_admin, require_reviewer
from ...db.engine_sync import get_sync_session
from ...models.user import User
from ...services import aggregation
from ...services.client_service import ClientService
from ...services.user_service import UserService
from ...utils.periods import Period
from .models import (
    Client,
    ClientAssign,
    ClientCreate,
    ClientDetail,
    ClientUpdate,
    ClientWithSummary,
    CreatedUser,
    DeletedUser,
)

router = APIRouter()


# --- Dependency Injectors ---
def get_client_service(session: Session = Depends(get_sync_session)) -> ClientService:
    return ClientService(session)


def get_user_service(session: Session = Depends(get_sync_session)) -> UserService:
    return UserService(session)


def _with_summary(client: User, summary: aggregation.ClientSummary) -> dict:
    data = Client.model_validate(client).model_dump()
    data["summary"] = asdict(summary)
    return data


# --- Client Endpoints ---


@router.get("/clients", response_model=list[ClientWithSummary])
def api_get_clients(
    service: ClientService = Depends(get_client_service),
    principal: Principal = Depends(require_reviewer),
):
    period = Period.current()
    return [
        _with_summary(client, aggregation.summarize_client(client, payments, period))
        for client, payments in service.get_clients_with_payments(principal)
    ]


@router.get("/clients/{client_id}", response_model=ClientDetail)
def api_get_client(
    client_id: uuid.UUID,
    service: ClientService = Depends(get_client_service),
    principal: Principal = Depends(require_reviewer),
):
    try:
        detail = service.get_client_detail(client_id, principal)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))

    data = _with_summary(detail["client"], detail["summary"])
    data["payments"] = detail["payments"]
    return data


@router.post("/clients", response_model=CreatedUser, status_code=status.HTTP_201_CREATED)
def api_create_client(
    client: ClientCreate,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    try:
        new_client = service.create_client(
            client.email,
            client.password,
            client.name,
            created_by=principal.id,
            target_amount=client.target_amount,
            fixed_amount=client.fixed_amount,
            assigned_subadmin_id=client.assigned_subadmin_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    log_action(AuditAction.CREATE, "client", str(new_client.id), principal=principal, request=request)
    return CreatedUser(uid=new_client.id)


@router.delete("/clients", response_model=DeletedUser)
def api_delete_client(
    request: Request,
    id: uuid.UUID = Query(..., description="Client or SubAdmin id"),
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    """
    Delete a client (with all of its payments) or a subadmin (unassigning its
    clients). Both cascades run in one transaction.
    """
    try:
        result = service.delete_user(id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))

    log_action(
        AuditAction.DELETE,
        result["role"],
        str(id),
        principal=principal,
        request=request,
        details={"deleted_payments": result["deleted_payments"], "unassigned_clients": result["unassigned_clients"]},
    )
    return DeletedUser(**result)


@router.put("/clients/{client_id}", response_model=Client)
def api_update_client(
    client_id: uuid.UUID,
    client_update: ClientUpdate,
    request: Request,
    service: ClientService = Depends(get_client_service),
    principal: Principal = Depends(require_admin),
):
    update_fields = client_update.model_dump(exclude_unset=True)
    try:
        updated_client = service.update_client(client_id, principal, update_fields)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    log_action(
        AuditAction.UPDATE, "client", str(client_id), principal=principal, request=request, details=update_fields
    )
    return updated_client


# --- Assignment Endpoints ---


@router.put("/clients/{client_id}/subadmin", response_model=Client)
def api_assign_client(
    client_id: uuid.UUID,
    assignment: ClientAssign,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    try:
        client = service.assign_client(client_id, assignment.subadmin_id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    log_action(
        AuditAction.UPDATE,
        "client",
        str(client_id),
        principal=principal,
        request=request,
        details={"assigned_subadmin_id": str(assignment.subadmin_id)},
    )
    return client


@router.delete("/clients/{client_id}/subadmin", response_model=Client)
def api_unassign_client(
    client_id: uuid.UUID,
    request: Request,
    service: UserService = Depends(get_user_service),
    principal: Principal = Depends(require_admin),
):
    try:
        client = service.unassign_client(client_id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    log_action(
        AuditAction.UPDATE,
        "client",
        str(client_id),
        principal=principal,
        request=request,
        details={"assigned_subadmin_id": None},
    )
    return client

