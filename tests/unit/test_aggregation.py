"""Tests for the per-client aggregation functions."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.constants import PaymentStatus
from app.models.payment import Payment
from app.models.user import User
from app.services import aggregation
from app.utils.periods import Period

JUNE = Period(2025, 6)
CLIENT_ID = uuid.uuid4()


def payment(amount, status=PaymentStatus.APPROVED, period=JUNE, uploaded_at=None):
    return Payment(
        client_id=CLIENT_ID,
        amount=amount,
        status=status.value,
        period_year=period.year,
        period_month=period.month,
        uploaded_at=uploaded_at,
    )


class TestTargets:
    def test_fixed_amount_wins_when_positive(self):
        assert aggregation.effective_target(25000, 50000) == 25000

    def test_falls_back_to_target_amount(self):
        assert aggregation.effective_target(0, 50000) == 50000
        assert aggregation.effective_target(None, 50000) == 50000
        assert aggregation.effective_target(None, None) == 0

    def test_remaining_is_not_clamped(self):
        assert aggregation.remaining([payment(12000)], 10000, 0) == -2000


class TestProgress:
    @pytest.mark.parametrize("approved", [0, 1, 5000, 10000, 10**9])
    def test_progress_stays_within_bounds(self, approved):
        payments = [payment(approved)] if approved else []
        percent = aggregation.progress_percent(payments, 10000, 0)
        assert 0 <= percent <= 100

    def test_progress_is_zero_without_goal(self):
        assert aggregation.progress_percent([payment(500)], 0, 0) == 0

    def test_only_approved_count(self):
        payments = [
            payment(6000),
            payment(5000, PaymentStatus.REJECTED),
            payment(700, PaymentStatus.PENDING),
            payment(900, PaymentStatus.SCHEDULED),
        ]
        assert aggregation.total_approved(payments) == 6000
        assert aggregation.progress_percent(payments, 10000, 0) == 60


class TestDefaulters:
    def test_client_without_payments_is_defaulter(self):
        assert aggregation.is_defaulter([], JUNE) is True

    def test_approved_payment_for_period_settles_it(self):
        assert aggregation.is_defaulter([payment(100)], Period.parse("June 2025")) is False

    def test_other_month_or_pending_does_not_settle(self):
        payments = [payment(100, period=Period(2025, 5)), payment(100, PaymentStatus.PENDING)]
        assert aggregation.is_defaulter(payments, JUNE) is True


def test_pending_months_are_distinct_and_chronological():
    payments = [
        payment(1, PaymentStatus.PENDING, Period(2025, 2)),
        payment(1, PaymentStatus.PENDING, Period(2024, 12)),
        payment(1, PaymentStatus.PENDING, Period(2025, 2)),
        payment(1, PaymentStatus.APPROVED, Period(2025, 3)),
    ]
    assert aggregation.pending_months(payments) == ["December 2024", "February 2025"]


def test_count_by_status_reports_every_status():
    counts = aggregation.count_by_status([payment(1), payment(1, PaymentStatus.PENDING)])
    assert counts == {"pending": 1, "approved": 1, "rejected": 0, "scheduled": 0}


def test_submissions_on_matches_utc_day():
    utc = timezone.utc
    payments = [
        payment(1, PaymentStatus.PENDING, uploaded_at=datetime(2025, 6, 15, 0, 0, tzinfo=utc)),
        # naive values, as SQLite hands them back, are read as UTC
        payment(1, PaymentStatus.PENDING, uploaded_at=datetime(2025, 6, 15, 23, 59)),
        payment(1, PaymentStatus.PENDING, uploaded_at=datetime(2025, 6, 16, 0, 0, tzinfo=utc)),
        # 20:00 on the 14th at UTC-5 is 01:00 on the 15th in UTC
        payment(1, PaymentStatus.PENDING, uploaded_at=datetime(2025, 6, 14, 20, 0, tzinfo=timezone(timedelta(hours=-5)))),
        payment(1, PaymentStatus.PENDING),
    ]
    assert len(aggregation.submissions_on(payments, datetime(2025, 6, 15, 12, tzinfo=utc))) == 3


def test_summarize_client():
    client = User(
        id=CLIENT_ID,
        email="c@example.com",
        hashed_password="x",
        name="Client",
        target_amount=50000,
        fixed_amount=10000,
    )
    payments = [payment(6000), payment(5000, PaymentStatus.PENDING, Period(2025, 7))]

    summary = aggregation.summarize_client(client, payments, JUNE)

    assert summary.effective_target == 10000
    assert summary.total_approved == 6000
    assert summary.remaining == 4000
    assert summary.progress_percent == 60
    assert summary.is_defaulter is False
    assert summary.pending_months == ["July 2025"]
    assert summary.assigned_subadmin_id is None
