# app/services/user_service.py
"""
User accounts: admins, subadmins and clients share the users table.
"""
import logging
import math
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, update
from sqlmodel import Session, select

from app.core.constants import UserRole
from app.core.users import password_helper
from app.models.payment import Payment
from app.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserService:
    def __init__(self, session: Session):
        self.session = session

    # --- Lookups ---
    def get_user(self, user_id: uuid.UUID, role: Optional[str] = None) -> User:
        user = self.session.get(User, user_id)
        if not user or (role and user.role != role):
            label = role or "User"
            raise FileNotFoundError(f"{label.capitalize()} {user_id} not found.")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email.lower())).first()

    def admin_exists(self) -> bool:
        statement = select(User).where(User.role == UserRole.ADMIN.value).limit(1)
        return self.session.exec(statement).first() is not None

    def get_subadmins(self) -> List[Dict[str, Any]]:
        """All subadmins with the number of clients assigned to each."""
        subadmins = self.session.exec(
            select(User).where(User.role == UserRole.SUBADMIN.value).order_by(User.name)
        ).all()
        counts = dict(
            self.session.exec(
                select(User.assigned_subadmin_id, func.count(User.id))
                .where(User.role == UserRole.CLIENT.value, User.assigned_subadmin_id.is_not(None))
                .group_by(User.assigned_subadmin_id)
            ).all()
        )
        return [_subadmin_row(subadmin, counts.get(subadmin.id, 0)) for subadmin in subadmins]

    def get_subadmin(self, subadmin_id: uuid.UUID) -> Dict[str, Any]:
        """One subadmin with its assigned client count."""
        subadmin = self.get_user(subadmin_id, UserRole.SUBADMIN.value)
        client_count = self.session.exec(
            select(func.count(User.id)).where(
                User.role == UserRole.CLIENT.value, User.assigned_subadmin_id == subadmin.id
            )
        ).one()
        return _subadmin_row(subadmin, client_count)

    # --- Creation ---
    def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
        created_by: Optional[uuid.UUID] = None,
        commit: bool = True,
        **fields: Any,
    ) -> User:
        email = (email or "").strip().lower()
        name = (name or "").strip()
        if not email or not password or not name:
            raise ValueError("Missing required fields: name, email and password.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        if self.get_user_by_email(email):
            raise ValueError(f"A user with email {email} already exists.")

        user = User(
            email=email,
            hashed_password=password_helper.hash(password),
            name=name,
            role=role.value,
            is_active=True,
            is_verified=True,
            is_superuser=role == UserRole.ADMIN,
            created_by=created_by,
            **fields,
        )
        self.session.add(user)
        if commit:
            self.session.commit()
            self.session.refresh(user)
        logger.info(f"✅ {role.value} created: {email}")
        return user

    def create_first_admin(self, email: str, password: str, name: str) -> User:
        """One-time bootstrap. Disabled as soon as any admin exists."""
        if self.admin_exists():
            raise PermissionError("Admin account already exists. Setup disabled.")
        return self.create_user(email, password, name, UserRole.ADMIN)

    def create_subadmin(
        self,
        email: str,
        password: str,
        name: str,
        created_by: uuid.UUID,
        client_ids: Optional[List[uuid.UUID]] = None,
    ) -> User:
        """Create a subadmin and optionally hand it some currently unassigned clients."""
        clients = [self.get_user(cid, UserRole.CLIENT.value) for cid in client_ids or []]
        taken = [str(c.id) for c in clients if c.assigned_subadmin_id]
        if taken:
            raise ValueError(f"Clients already assigned to a subadmin: {', '.join(taken)}")

        try:
            subadmin = self.create_user(
                email, password, name, UserRole.SUBADMIN, created_by=created_by, commit=False
            )
            for client in clients:
                client.assigned_subadmin_id = subadmin.id
                self.session.add(client)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(subadmin)
        return subadmin

    def create_client(
        self,
        email: str,
        password: str,
        name: str,
        created_by: uuid.UUID,
        target_amount: float = 0,
        fixed_amount: float = 0,
        assigned_subadmin_id: Optional[uuid.UUID] = None,
        require_subadmin: bool = False,
    ) -> User:
        if assigned_subadmin_id:
            try:
                self.get_user(assigned_subadmin_id, UserRole.SUBADMIN.value)
            except FileNotFoundError:
                raise ValueError("Invalid SubAdmin ID")
        elif require_subadmin:
            raise ValueError("Client must be assigned to a SubAdmin")

        amounts = (float(target_amount or 0), float(fixed_amount or 0))
        if not all(math.isfinite(a) for a in amounts):
            raise ValueError("Target and fixed amounts must be finite numbers.")
        if any(a < 0 for a in amounts):
            raise ValueError("Target and fixed amounts cannot be negative.")

        return self.create_user(
            email,
            password,
            name,
            UserRole.CLIENT,
            created_by=created_by,
            target_amount=float(target_amount or 0),
            fixed_amount=float(fixed_amount or 0),
            assigned_subadmin_id=assigned_subadmin_id,
        )

    # --- Updates ---
    def set_terminated(self, subadmin_id: uuid.UUID, terminated: bool) -> User:
        subadmin = self.get_user(subadmin_id, UserRole.SUBADMIN.value)
        subadmin.terminated = terminated
        self.session.add(subadmin)
        self.session.commit()
        self.session.refresh(subadmin)
        return subadmin

    def assign_client(self, client_id: uuid.UUID, subadmin_id: uuid.UUID) -> User:
        client = self.get_user(client_id, UserRole.CLIENT.value)
        self.get_user(subadmin_id, UserRole.SUBADMIN.value)
        client.assigned_subadmin_id = subadmin_id
        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)
        return client

    def unassign_client(self, client_id: uuid.UUID) -> User:
        client = self.get_user(client_id, UserRole.CLIENT.value)
        client.assigned_subadmin_id = None
        self.session.add(client)
        self.session.commit()
        self.session.refresh(client)
        return client

    # --- Deletion ---
    def delete_user(self, user_id: uuid.UUID, role: Optional[str] = None) -> Dict[str, Any]:
        """
        Delete a client or subadmin account in a single transaction:
        - clients pointing at it are unassigned (never deleted),
        - every payment it owns is deleted,
        - the account row itself is removed.
        """
        user = self.get_user(user_id, role)
        if user.role == UserRole.ADMIN.value:
            raise PermissionError("Admin accounts cannot be deleted here.")
        user_role = user.role

        try:
            unassigned = self.session.execute(
                update(User)
                .where(User.assigned_subadmin_id == user_id)
                .values(assigned_subadmin_id=None)
            ).rowcount
            deleted_payments = self.session.execute(
                delete(Payment).where(Payment.client_id == user_id)
            ).rowcount
            self.session.delete(user)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"❌ Error deleting user {user_id}: {e}", exc_info=True)
            raise

        logger.info(
            f"🗑️ Deleted {user_role} {user_id}: {deleted_payments} payments removed, "
            f"{unassigned} clients unassigned"
        )
        return {
            "id": str(user_id),
            "role": user_role,
            "deleted_payments": deleted_payments,
            "unassigned_clients": unassigned,
        }


def _subadmin_row(subadmin: User, client_count: int) -> Dict[str, Any]:
    data = subadmin.model_dump(exclude={"hashed_password"})
    data["client_count"] = client_count
    return data
