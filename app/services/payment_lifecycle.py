# app/services/payment_lifecycle.py
"""
Payment lifecycle rules.

Pure functions: nothing here touches the database. Every operation validates
its inputs before mutating the payment, so a rejected call leaves the record
exactly as it was.

    (new) ──claim/request──▶ pending ──approve──▶ approved
    (new) ──prepaid──────▶ scheduled ──promote──▶ pending ──reject──▶ rejected
"""
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from app.core.constants import PaymentStatus, PaymentTag
from app.models.payment import Payment
from app.utils.clock import utc_now
from app.utils.periods import Period

TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.SCHEDULED: frozenset({PaymentStatus.PENDING}),
    PaymentStatus.PENDING: frozenset({PaymentStatus.APPROVED, PaymentStatus.REJECTED}),
    PaymentStatus.APPROVED: frozenset(),
    PaymentStatus.REJECTED: frozenset(),
}


@dataclass
class ScheduledItem:
    """One month of a prepaid request. A missing amount falls back to the base amount."""

    amount: float | None = None
    description: str | None = None


def can_transition(current: str, target: str) -> bool:
    try:
        return PaymentStatus(target) in TRANSITIONS[PaymentStatus(current)]
    except ValueError:
        return False


def _require_transition(payment: Payment, target: PaymentStatus) -> None:
    if not can_transition(payment.status, target):
        raise ValueError(
            f"Payment {payment.id} is '{payment.status}' and cannot become '{target.value}'."
        )


def _require_positive(amount: float | None, what: str = "Amount") -> float:
    if amount is None:
        raise ValueError(f"{what} is required.")
    amount = float(amount)
    if not math.isfinite(amount):
        raise ValueError(f"{what} must be a finite number.")
    if amount <= 0:
        raise ValueError(f"{what} must be greater than zero.")
    return amount


def new_claim(
    client_id: uuid.UUID,
    amount: float,
    period: Period,
    screenshot_url: str | None = None,
    description: str | None = None,
    now: datetime | None = None,
) -> Payment:
    """A client self-submits a claim."""
    amount = _require_positive(amount)
    return Payment(
        client_id=client_id,
        amount=amount,
        status=PaymentStatus.PENDING.value,
        period_year=period.year,
        period_month=period.month,
        description=description,
        tag=PaymentTag.REGULAR.value,
        screenshot_url=screenshot_url or "",
        uploaded_at=now or utc_now(),
    )


def new_request(
    client_id: uuid.UUID,
    amount: float,
    period: Period,
    requested_by: uuid.UUID,
    description: str | None = None,
    now: datetime | None = None,
) -> Payment:
    """A subadmin creates a regular (non-prepaid) request on behalf of a client."""
    amount = _require_positive(amount)
    return Payment(
        client_id=client_id,
        amount=amount,
        status=PaymentStatus.PENDING.value,
        period_year=period.year,
        period_month=period.month,
        description=description or "Payment Request",
        tag=PaymentTag.REGULAR.value,
        screenshot_url="",
        requested_at=now or utc_now(),
        requested_by=requested_by,
    )


def schedule_months(
    client_id: uuid.UUID,
    start: Period,
    items: Sequence[ScheduledItem],
    requested_by: uuid.UUID,
    base_amount: float | None = None,
    base_description: str | None = None,
    now: datetime | None = None,
) -> list[Payment]:
    """
    A subadmin pre-creates one scheduled payment per consecutive month,
    starting at `start`. All rows are validated before any is built.
    """
    if not items:
        raise ValueError("A prepaid request needs at least one month.")

    now = now or utc_now()
    planned: list[tuple[Period, float, str]] = []
    for offset, item in enumerate(items):
        period = start.shifted(offset)
        amount = item.amount if item.amount is not None else base_amount
        amount = _require_positive(amount, f"Amount for {period.label}")
        description = item.description or base_description or f"Prepayment ({period.label})"
        planned.append((period, amount, description))

    return [
        Payment(
            client_id=client_id,
            amount=amount,
            status=PaymentStatus.SCHEDULED.value,
            period_year=period.year,
            period_month=period.month,
            description=description,
            tag=PaymentTag.PREPAID.value,
            screenshot_url="",
            requested_at=now,
            requested_by=requested_by,
        )
        for period, amount, description in planned
    ]


def is_due(payment: Payment, period: Period) -> bool:
    return payment.status == PaymentStatus.SCHEDULED.value and payment.period == period


def promote_scheduled(payments: Iterable[Payment], period: Period) -> list[Payment]:
    """
    Flip every scheduled payment of `period` to pending. Only the status
    changes. Returns the promoted payments.
    """
    promoted = []
    for payment in payments:
        if is_due(payment, period):
            payment.status = PaymentStatus.PENDING.value
            promoted.append(payment)
    return promoted


def approve(
    payment: Payment,
    amount: float,
    reviewer_id: uuid.UUID,
    now: datetime | None = None,
) -> Payment:
    """Approve a pending payment; the reviewer's amount replaces the requested one."""
    _require_transition(payment, PaymentStatus.APPROVED)
    amount = _require_positive(amount)

    payment.amount = amount
    payment.status = PaymentStatus.APPROVED.value
    payment.reviewed_at = now or utc_now()
    payment.reviewed_by = reviewer_id
    return payment


def reject(
    payment: Payment,
    notes: str,
    reviewer_id: uuid.UUID,
    now: datetime | None = None,
) -> Payment:
    """Reject a pending payment. A reason is mandatory."""
    _require_transition(payment, PaymentStatus.REJECTED)
    reason = (notes or "").strip()
    if not reason:
        raise ValueError("A rejection reason is required.")

    payment.notes = reason
    payment.status = PaymentStatus.REJECTED.value
    payment.reviewed_at = now or utc_now()
    payment.reviewed_by = reviewer_id
    return payment
