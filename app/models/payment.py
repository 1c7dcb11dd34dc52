# app/models/payment.py
"""
Payment model for client payment tracking.
"""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.constants import PaymentStatus, PaymentTag
from app.utils.clock import as_utc
from app.utils.periods import Period


class Payment(SQLModel, table=True):
    """
    Payment model representing a claim that money was paid by/for a client.

    Fields:
    - id: generated UUID
    - client_id: owning client (required, never changes)
    - amount: requested amount, or the reviewer-confirmed amount once approved
    - status: pending, approved, rejected or scheduled
    - period_year / period_month: billing period the payment counts toward
    - description: free text
    - tag: regular or prepaid
    - screenshot_url: evidence reference (empty for subadmin requests)
    - uploaded_at: client self-submission timestamp
    - requested_at / requested_by: subadmin-created request
    - reviewed_at / reviewed_by: set when the payment leaves pending
    - notes: rejection reason
    """

    __tablename__ = "payments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    client_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    amount: float = Field(default=0, nullable=False)
    status: str = Field(default=PaymentStatus.PENDING.value, index=True, max_length=20)
    period_year: int = Field(nullable=False)
    period_month: int = Field(nullable=False)
    description: str | None = Field(default=None)
    tag: str = Field(default=PaymentTag.REGULAR.value, max_length=20)
    screenshot_url: str | None = Field(default=None)
    uploaded_at: datetime | None = Field(default=None)
    requested_at: datetime | None = Field(default=None)
    requested_by: uuid.UUID | None = Field(default=None)
    reviewed_at: datetime | None = Field(default=None)
    reviewed_by: uuid.UUID | None = Field(default=None)
    notes: str | None = Field(default=None)

    @property
    def period(self) -> Period:
        return Period(self.period_year, self.period_month)

    @property
    def month(self) -> str:
        """Display label, e.g. "March 2025"."""
        return self.period.label

    @property
    def created_at(self) -> datetime | None:
        return as_utc(self.uploaded_at or self.requested_at)
