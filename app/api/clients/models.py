# app/api/clients/models.py
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..payments.models import Payment


# --- Pydantic models (Client) ---
class ClientSummary(BaseModel):
    client_id: uuid.UUID
    name: str
    email: str
    target_amount: float
    fixed_amount: float
    effective_target: float
    total_approved: float
    remaining: float
    progress_percent: float
    is_defaulter: bool
    pending_months: list[str] = []
    status_counts: dict[str, int] = {}
    assigned_subadmin_id: uuid.UUID | None = None
    model_config = ConfigDict(from_attributes=True)


class Client(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    target_amount: float = 0
    fixed_amount: float = 0
    assigned_subadmin_id: uuid.UUID | None = None
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class ClientWithSummary(Client):
    summary: ClientSummary


class ClientDetail(ClientWithSummary):
    payments: list[Payment] = []


class ClientCreate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str
    email: EmailStr
    password: str
    target_amount: float = Field(default=0, ge=0)
    fixed_amount: float = Field(default=0, ge=0)
    assigned_subadmin_id: uuid.UUID | None = None


class ClientUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str | None = None
    target_amount: float | None = Field(default=None, ge=0)
    fixed_amount: float | None = Field(default=None, ge=0)


class ClientAssign(BaseModel):
    subadmin_id: uuid.UUID


class CreatedUser(BaseModel):
    success: bool = True
    uid: uuid.UUID


class DeletedUser(BaseModel):
    success: bool = True
    id: uuid.UUID
    role: str
    deleted_payments: int
    unassigned_clients: int
