# app/schemas/user.py
"""
Pydantic schemas for FastAPI Users and user listings.
These schemas control what data is sent/received via the API.
"""
import uuid
from datetime import datetime
from typing import Optional

from fastapi_users import schemas
from pydantic import BaseModel, ConfigDict


class UserRead(schemas.BaseUser[uuid.UUID]):
    """
    Schema for reading user data (API responses).
    Includes all safe-to-expose user fields.
    """

    name: str
    role: str
    terminated: bool = False
    target_amount: float = 0
    fixed_amount: float = 0
    assigned_subadmin_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None


class UserUpdate(schemas.BaseUserUpdate):
    """
    Self-service profile update (PATCH /users/me).
    Role, goals and assignments are managed by admins only.
    """

    name: Optional[str] = None


class PrincipalRead(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    name: str
    terminated: bool
    model_config = ConfigDict(from_attributes=True)
