# app/services/aggregation.py
"""
Per-client financial figures derived from a list of payments.

Everything here is a pure function recomputed on every read: no caching and
no incremental updates. Each call is O(number of payments passed in).
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from app.core.constants import PaymentStatus
from app.models.payment import Payment
from app.models.user import User
from app.utils.clock import as_utc, utc_day_bounds
from app.utils.periods import Period


def _approved(payments: Iterable[Payment]) -> list[Payment]:
    return [p for p in payments if p.status == PaymentStatus.APPROVED.value]


def total_approved(payments: Iterable[Payment]) -> float:
    return sum((p.amount or 0) for p in _approved(payments))


def effective_target(fixed: float | None, target: float | None) -> float:
    """The fixed amount wins whenever it is positive."""
    fixed = fixed or 0
    return fixed if fixed > 0 else (target or 0)


def remaining(payments: Iterable[Payment], fixed: float | None, target: float | None) -> float:
    """Goal minus approved total. Not clamped: overpayment gives a negative value."""
    return effective_target(fixed, target) - total_approved(payments)


def progress_percent(payments: Iterable[Payment], fixed: float | None, target: float | None) -> float:
    goal = effective_target(fixed, target)
    if goal <= 0:
        return 0.0
    percent = 100.0 * total_approved(payments) / goal
    return max(0.0, min(100.0, percent))


def is_current_month_settled(payments: Iterable[Payment], period: Period) -> bool:
    return any(p.period == period for p in _approved(payments))


def is_defaulter(payments: Iterable[Payment], period: Period) -> bool:
    """A client is a defaulter when nothing is approved for `period`."""
    return not is_current_month_settled(payments, period)


def pending_months(payments: Iterable[Payment]) -> list[str]:
    """Distinct labels of the months with pending payments, oldest first."""
    periods = {p.period for p in payments if p.status == PaymentStatus.PENDING.value}
    return [period.label for period in sorted(periods)]


def count_by_status(payments: Iterable[Payment]) -> dict[str, int]:
    counts = {status.value: 0 for status in PaymentStatus}
    for payment in payments:
        if payment.status in counts:
            counts[payment.status] += 1
    return counts


def submissions_on(payments: Iterable[Payment], day: date | datetime) -> list[Payment]:
    """Client self-submissions whose uploaded_at falls on the given UTC day."""
    start, end = utc_day_bounds(day)
    return [p for p in payments if p.uploaded_at is not None and start <= as_utc(p.uploaded_at) < end]


@dataclass
class ClientSummary:
    client_id: str
    name: str
    email: str
    target_amount: float
    fixed_amount: float
    effective_target: float
    total_approved: float
    remaining: float
    progress_percent: float
    is_defaulter: bool
    pending_months: list[str] = field(default_factory=list)
    status_counts: dict[str, int] = field(default_factory=dict)
    assigned_subadmin_id: str | None = None


def summarize_client(client: User, payments: Sequence[Payment], period: Period) -> ClientSummary:
    fixed = client.fixed_amount or 0
    target = client.target_amount or 0
    return ClientSummary(
        client_id=str(client.id),
        name=client.name,
        email=client.email,
        target_amount=target,
        fixed_amount=fixed,
        effective_target=effective_target(fixed, target),
        total_approved=total_approved(payments),
        remaining=remaining(payments, fixed, target),
        progress_percent=progress_percent(payments, fixed, target),
        is_defaulter=is_defaulter(payments, period),
        pending_months=pending_months(payments),
        status_counts=count_by_status(payments),
        assigned_subadmin_id=str(client.assigned_subadmin_id) if client.assigned_subadmin_id else None,
    )
