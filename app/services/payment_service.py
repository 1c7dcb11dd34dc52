# app/services/payment_service.py
"""
Payment service layer using SQLModel ORM.
Every state change goes through app.services.payment_lifecycle; this module
adds scoping, the daily quota and persistence.
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.config import settings
from app.core.constants import PaymentStatus
from app.core.users import Principal
from app.models.payment import Payment
from app.services import payment_lifecycle as lifecycle
from app.services.client_service import ClientService
from app.utils.clock import UTC_MIN, utc_day_bounds, utc_now
from app.utils.periods import Period

logger = logging.getLogger(__name__)


class QuotaExceededError(ValueError):
    """The client already reached today's submission limit."""


class PaymentService:
    """
    Service layer for Payment operations using SQLModel ORM.
    """

    def __init__(self, session: Session):
        self.session = session
        self.client_service = ClientService(session)

    # --- Reads ---
    def get_payment(self, payment_id: uuid.UUID, principal: Principal) -> Payment:
        payment = self.session.get(Payment, payment_id)
        if not payment:
            raise FileNotFoundError(f"Payment {payment_id} not found.")
        # Raises when the owning client is outside the caller's scope
        self.client_service.get_client(payment.client_id, principal)
        return payment

    def list_payments(
        self,
        principal: Principal,
        status: Optional[PaymentStatus] = None,
        client_id: Optional[uuid.UUID] = None,
    ) -> List[Payment]:
        """Payments visible to the caller, most recent first."""
        if client_id:
            client_ids = [self.client_service.get_client(client_id, principal).id]
        elif principal.is_client:
            client_ids = [principal.id]
        else:
            client_ids = [c.id for c in self.client_service.get_clients(principal)]

        if not client_ids:
            return []

        statement = select(Payment).where(Payment.client_id.in_(client_ids))
        if status:
            statement = statement.where(Payment.status == PaymentStatus(status).value)
        payments = list(self.session.exec(statement).all())
        payments.sort(key=lambda p: p.created_at or UTC_MIN, reverse=True)
        return payments

    def count_submissions_on(self, client_id: uuid.UUID, day: datetime) -> int:
        """Self-submissions by the client during the UTC day containing `day`."""
        start, end = utc_day_bounds(day)
        statement = select(func.count(Payment.id)).where(
            Payment.client_id == client_id,
            Payment.uploaded_at >= start,
            Payment.uploaded_at < end,
        )
        return self.session.exec(statement).one()

    def quota_status(self, client_id: uuid.UUID, now: Optional[datetime] = None) -> dict:
        now = now or utc_now()
        return self.quota_for(self.count_submissions_on(client_id, now))

    @staticmethod
    def quota_for(used: int) -> dict:
        limit = settings.daily_submission_limit
        return {"limit": limit, "used": used, "remaining": max(0, limit - used)}

    # --- Creation ---
    def submit_claim(
        self,
        principal: Principal,
        amount: float,
        period: Period,
        screenshot_url: Optional[str] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Payment:
        """A client self-submits a payment claim, subject to the daily quota."""
        if not principal.is_client:
            raise PermissionError("Only clients can submit payment claims.")

        now = now or utc_now()
        quota = self.quota_status(principal.id, now)
        if quota["remaining"] <= 0:
            raise QuotaExceededError(
                f"Daily limit of {quota['limit']} submissions reached. Try again tomorrow."
            )

        payment = lifecycle.new_claim(
            principal.id, amount, period, screenshot_url=screenshot_url, description=description, now=now
        )
        self._save([payment])
        logger.info(f"Claim {payment.id} submitted by client {principal.id} for {period.label}")
        return payment

    def create_request(
        self,
        principal: Principal,
        client_id: uuid.UUID,
        period: Period,
        amount: Optional[float] = None,
        description: Optional[str] = None,
        prepaid_items: Optional[Sequence[lifecycle.ScheduledItem]] = None,
        now: Optional[datetime] = None,
    ) -> List[Payment]:
        """
        A subadmin (or admin) creates a request for one of its clients.
        Without prepaid items this is a single pending request for `period`;
        with them, one scheduled payment per month starting at `period`.
        """
        if principal.is_client:
            raise PermissionError("Clients cannot create payment requests.")
        if principal.is_subadmin and principal.terminated:
            raise PermissionError("Your account has been terminated. You cannot create new requests.")

        client = self.client_service.get_client(client_id, principal)
        now = now or utc_now()

        if prepaid_items:
            payments = lifecycle.schedule_months(
                client.id,
                period,
                prepaid_items,
                requested_by=principal.id,
                base_amount=amount,
                base_description=description,
                now=now,
            )
        else:
            payments = [
                lifecycle.new_request(
                    client.id, amount, period, requested_by=principal.id, description=description, now=now
                )
            ]

        self._save(payments)
        logger.info(
            f"{len(payments)} payment request(s) created for client {client.id} by {principal.email}"
        )
        return payments

    # --- Review ---
    def approve_payment(
        self, principal: Principal, payment_id: uuid.UUID, amount: float, now: Optional[datetime] = None
    ) -> Payment:
        payment = self._get_for_review(principal, payment_id)
        lifecycle.approve(payment, amount, reviewer_id=principal.id, now=now)
        self._save([payment])
        logger.info(f"✅ Payment {payment.id} approved at {payment.amount} by {principal.email}")
        return payment

    def reject_payment(
        self, principal: Principal, payment_id: uuid.UUID, notes: str, now: Optional[datetime] = None
    ) -> Payment:
        payment = self._get_for_review(principal, payment_id)
        lifecycle.reject(payment, notes, reviewer_id=principal.id, now=now)
        self._save([payment])
        logger.info(f"❌ Payment {payment.id} rejected by {principal.email}")
        return payment

    def _get_for_review(self, principal: Principal, payment_id: uuid.UUID) -> Payment:
        if principal.is_client:
            raise PermissionError("Clients cannot review payments.")
        return self.get_payment(payment_id, principal)

    # --- Promotion ---
    def promote_due_scheduled(self, period: Optional[Period] = None) -> int:
        """
        Flip every scheduled payment of the current period to pending in one
        batched commit. Returns how many were promoted.
        """
        period = period or Period.current()
        statement = select(Payment).where(
            Payment.status == PaymentStatus.SCHEDULED.value,
            Payment.period_year == period.year,
            Payment.period_month == period.month,
        )
        due = self.session.exec(statement).all()
        promoted = lifecycle.promote_scheduled(due, period)
        if promoted:
            self._save(promoted)
            logger.info(f"⏫ Promoted {len(promoted)} scheduled payment(s) to pending for {period.label}")
        return len(promoted)

    # --- Persistence ---
    def _save(self, payments: Sequence[Payment]) -> None:
        try:
            for payment in payments:
                self.session.add(payment)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"Error saving payments: {e}", exc_info=True)
            raise
        for payment in payments:
            self.session.refresh(payment)
