# app/api/setup/main.py
"""
First-run API for creating the initial admin user.
Disabled for good once any admin exists.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, EmailStr, field_validator
from sqlmodel import Session

from app.core.audit import log_action
from app.core.config import settings
from app.core.constants import AuditAction
from app.core.rate_limit import limiter
from app.db.engine_sync import get_sync_session
from app.services.user_service import MIN_PASSWORD_LENGTH, UserService

logger = logging.getLogger(__name__)

router = APIRouter()


class SetupRequest(BaseModel):
    """Request body for creating the first admin user."""
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name cannot be empty.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return v


class SetupStatus(BaseModel):
    setup_required: bool


def get_user_service(session: Session = Depends(get_sync_session)) -> UserService:
    return UserService(session)


@router.get("/setup/status", response_model=SetupStatus)
def setup_status(service: UserService = Depends(get_user_service)):
    return SetupStatus(setup_required=not service.admin_exists())


@router.post("/setup")
@limiter.limit(settings.setup_rate_limit)
def create_first_admin(
    request: Request,
    request_body: SetupRequest,
    service: UserService = Depends(get_user_service),
):
    """
    Create the first admin user.
    This endpoint is only active while no admin exists.
    """
    try:
        admin = service.create_first_admin(
            request_body.email, request_body.password, request_body.name
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"🚀 [Setup] First admin user created: {admin.email}")
    log_action(AuditAction.CREATE, "admin", str(admin.id), request=request)
    return {"success": True, "uid": str(admin.id)}
