# app/api/dashboard/models.py
import uuid

from pydantic import BaseModel

from ..clients.models import ClientSummary


class Defaulter(BaseModel):
    client_id: uuid.UUID
    name: str
    email: str
    pending_months: list[str] = []


class Quota(BaseModel):
    limit: int
    used: int
    remaining: int


class Overview(BaseModel):
    period: str
    total_approved: float
    status_counts: dict[str, int]
    client_count: int
    clients: list[ClientSummary] = []
    defaulters: list[Defaulter] = []


class AdminDashboard(Overview):
    promoted: int = 0


class SubAdminDashboard(Overview):
    terminated: bool = False


class ClientDashboard(BaseModel):
    period: str
    summary: ClientSummary
    quota: Quota
