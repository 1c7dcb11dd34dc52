# app/api/admin/models.py
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr


class SubAdminCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    client_ids: list[uuid.UUID] = []


class SubAdmin(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    terminated: bool = False
    client_count: int = 0
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class SubAdminStatus(BaseModel):
    terminated: bool
