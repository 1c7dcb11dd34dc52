# app/services/client_service.py
"""
Client service layer using SQLModel ORM.
Clients are users with role "client"; their payments are materialized at read
time from payments.client_id.
"""
import logging
import math
import uuid
from datetime import datetime
from typing import Any, Dict, List, Tuple

from sqlmodel import Session, select

from app.core.constants import UserRole
from app.core.users import Principal
from app.models.payment import Payment
from app.models.user import User
from app.services import aggregation
from app.utils.clock import UTC_MIN
from app.utils.periods import Period

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "target_amount", "fixed_amount"}


class ClientService:
    """
    Service layer for Client operations, always scoped to the caller.
    """

    def __init__(self, session: Session):
        self.session = session

    # --- Scope ---
    @staticmethod
    def in_scope(principal: Principal, client: User) -> bool:
        if principal.is_admin:
            return True
        if principal.is_subadmin:
            return client.assigned_subadmin_id == principal.id
        return client.id == principal.id

    def ensure_in_scope(self, principal: Principal, client: User) -> None:
        if not self.in_scope(principal, client):
            raise PermissionError(f"Client {client.id} is outside your scope.")

    # --- Reads ---
    def get_client(self, client_id: uuid.UUID, principal: Principal) -> User:
        client = self.session.get(User, client_id)
        if not client or client.role != UserRole.CLIENT.value:
            raise FileNotFoundError(f"Client {client_id} not found.")
        self.ensure_in_scope(principal, client)
        return client

    def get_clients(self, principal: Principal) -> List[User]:
        """Clients visible to the caller, ordered by name."""
        statement = select(User).where(User.role == UserRole.CLIENT.value)
        if principal.is_subadmin:
            statement = statement.where(User.assigned_subadmin_id == principal.id)
        elif principal.is_client:
            statement = statement.where(User.id == principal.id)
        return list(self.session.exec(statement.order_by(User.name)).all())

    def get_clients_with_payments(self, principal: Principal) -> List[Tuple[User, List[Payment]]]:
        """
        Each visible client paired with its payments (most recent first).
        Two queries: one for clients, one for all of their payments.
        """
        clients = self.get_clients(principal)
        if not clients:
            return []

        ids = [c.id for c in clients]
        payments = self.session.exec(select(Payment).where(Payment.client_id.in_(ids))).all()

        by_client: Dict[uuid.UUID, List[Payment]] = {cid: [] for cid in ids}
        for payment in payments:
            by_client[payment.client_id].append(payment)
        for items in by_client.values():
            items.sort(key=_newest_first_key, reverse=True)

        return [(client, by_client[client.id]) for client in clients]

    def get_client_payments(self, client: User) -> List[Payment]:
        payments = list(
            self.session.exec(select(Payment).where(Payment.client_id == client.id)).all()
        )
        payments.sort(key=_newest_first_key, reverse=True)
        return payments

    def get_client_detail(
        self, client_id: uuid.UUID, principal: Principal, period: Period | None = None
    ) -> Dict[str, Any]:
        client = self.get_client(client_id, principal)
        payments = self.get_client_payments(client)
        summary = aggregation.summarize_client(client, payments, period or Period.current())
        return {"client": client, "payments": payments, "summary": summary}

    # --- Writes ---
    def update_client(self, client_id: uuid.UUID, principal: Principal, client_update: Dict[str, Any]) -> User:
        """Update name and goal amounts."""
        if not client_update:
            raise ValueError("No fields to update provided.")

        client = self.get_client(client_id, principal)
        changes = {}
        for key, value in client_update.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if key in ("target_amount", "fixed_amount"):
                value = float(value or 0)
                if not math.isfinite(value):
                    raise ValueError(f"{key} must be a finite number.")
                if value < 0:
                    raise ValueError(f"{key} cannot be negative.")
            changes[key] = value

        for key, value in changes.items():
            setattr(client, key, value)

        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)
        return client


def _newest_first_key(payment: Payment) -> datetime:
    return payment.created_at or UTC_MIN
