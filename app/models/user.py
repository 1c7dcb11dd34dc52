# app/models/user.py
"""
User model for FastAPI Users with SQLModel.
One table holds admins, subadmins and clients; the role decides which of the
custom fields are meaningful.
"""

import uuid as uuid_pkg
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.constants import UserRole
from app.utils.clock import utc_now


class User(SQLModel, table=True):
    """
    User model combining FastAPI Users authentication fields with PayTrack fields.

    FastAPI Users required fields:
    - id: UUID (primary key, the identity-provider uid)
    - email: str (unique, indexed)
    - hashed_password: str
    - is_active / is_superuser / is_verified: bool

    Custom fields:
    - name: display name
    - role: admin, subadmin or client
    - target_amount: legacy cumulative goal (clients)
    - fixed_amount: preferred cumulative goal when > 0 (clients)
    - assigned_subadmin_id: owning subadmin (clients)
    - terminated: subadmin may no longer create payment requests
    - created_by: admin who created the account
    """

    __tablename__ = "users"

    # FastAPI Users required fields
    id: uuid_pkg.UUID = Field(default_factory=uuid_pkg.uuid4, primary_key=True, nullable=False)
    email: str = Field(unique=True, index=True, nullable=False, max_length=320)
    hashed_password: str = Field(nullable=False, max_length=1024)
    is_active: bool = Field(default=True, nullable=False)
    is_superuser: bool = Field(default=False, nullable=False)
    is_verified: bool = Field(default=False, nullable=False)

    # Custom fields
    name: str = Field(default="", max_length=200)
    role: str = Field(default=UserRole.CLIENT.value, index=True, max_length=20)
    target_amount: float = Field(default=0)
    fixed_amount: float = Field(default=0)
    assigned_subadmin_id: uuid_pkg.UUID | None = Field(default=None, index=True)
    terminated: bool = Field(default=False)
    created_by: uuid_pkg.UUID | None = Field(default=None)
    created_at: datetime | None = Field(default_factory=utc_now)
