# app/api/payments/models.py
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from ...core.constants import PaymentStatus, PaymentTag
from ...services.payment_lifecycle import ScheduledItem
from ...utils.periods import Period


# --- Billing period input ---
class PeriodInput(BaseModel):
    """
    A billing period, either as a label ("March 2025") or as numbers.
    When neither is given the current month is used.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    month: str | None = None
    period_year: int | None = None
    period_month: int | None = Field(default=None, ge=1, le=12)

    @model_validator(mode="after")
    def check_period(self):
        if self.month:
            Period.parse(self.month)
        elif (self.period_year is None) != (self.period_month is None):
            raise ValueError("period_year and period_month must be given together.")
        return self

    def to_period(self) -> Period:
        if self.month:
            return Period.parse(self.month)
        if self.period_year is not None and self.period_month is not None:
            return Period.of(self.period_year, self.period_month)
        return Period.current()


# --- Pydantic models (Payments) ---
class Payment(BaseModel):
    id: uuid.UUID
    client_id: uuid.UUID
    amount: float
    status: PaymentStatus
    period_year: int
    period_month: int
    description: str | None = None
    tag: PaymentTag = PaymentTag.REGULAR
    screenshot_url: str | None = None
    uploaded_at: datetime | None = None
    requested_at: datetime | None = None
    requested_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    reviewed_by: uuid.UUID | None = None
    notes: str | None = None
    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def month(self) -> str:
        return Period(self.period_year, self.period_month).label


class PaymentCreate(PeriodInput):
    """Client self-submission."""

    amount: float
    screenshot_url: str | None = None
    description: str | None = None


class PrepaidMonth(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float | None = None
    description: str | None = None


class PaymentRequestCreate(PeriodInput):
    """
    Subadmin request. With `prepaid` set, one scheduled payment is created per
    month starting at the given period: either one per entry of `items`, or
    `duration` months all at `amount`.
    """

    client_id: uuid.UUID
    amount: float | None = None
    description: str | None = None
    prepaid: bool = False
    duration: int | None = Field(default=None, ge=1, le=24)
    items: list[PrepaidMonth] = []

    def scheduled_items(self) -> list[ScheduledItem]:
        if not self.prepaid:
            return []
        if self.items:
            return [ScheduledItem(amount=i.amount, description=i.description) for i in self.items]
        return [ScheduledItem() for _ in range(self.duration or 0)]


class PaymentApprove(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float


class PaymentReject(BaseModel):
    notes: str


class OcrRequest(BaseModel):
    image_url: str


class OcrResponse(BaseModel):
    success: bool = True
    amount: float
    currency: str
