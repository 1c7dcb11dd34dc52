# app/services/dashboard_service.py
"""
Dashboard loads. Every figure is recomputed from the full payment set of the
caller's scope; the admin load also promotes scheduled payments that reached
their month.
"""
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Session

from app.core.users import Principal
from app.services import aggregation
from app.services.client_service import ClientService
from app.services.payment_service import PaymentService
from app.utils.clock import utc_now
from app.utils.periods import Period

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, session: Session):
        self.session = session
        self.client_service = ClientService(session)
        self.payment_service = PaymentService(session)

    def load_admin_dashboard(self, principal: Principal, now: Optional[datetime] = None) -> Dict[str, Any]:
        period = Period.current(now)
        promoted = self.payment_service.promote_due_scheduled(period)
        data = self._overview(principal, period)
        data["promoted"] = promoted
        return data

    def load_subadmin_dashboard(self, principal: Principal, now: Optional[datetime] = None) -> Dict[str, Any]:
        data = self._overview(principal, Period.current(now))
        data["terminated"] = principal.terminated
        return data

    def load_client_dashboard(self, principal: Principal, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utc_now()
        period = Period.current(now)
        client = self.client_service.get_client(principal.id, principal)
        payments = self.client_service.get_client_payments(client)
        summary = aggregation.summarize_client(client, payments, period)
        return {
            "period": period.label,
            "summary": asdict(summary),
            "quota": self.payment_service.quota_for(len(aggregation.submissions_on(payments, now))),
        }

    def _overview(self, principal: Principal, period: Period) -> Dict[str, Any]:
        rows = self.client_service.get_clients_with_payments(principal)
        all_payments = [p for _, payments in rows for p in payments]

        summaries = [aggregation.summarize_client(client, payments, period) for client, payments in rows]
        defaulters = [
            {
                "client_id": s.client_id,
                "name": s.name,
                "email": s.email,
                "pending_months": s.pending_months,
            }
            for s in summaries
            if s.is_defaulter
        ]

        return {
            "period": period.label,
            "total_approved": aggregation.total_approved(all_payments),
            "status_counts": aggregation.count_by_status(all_payments),
            "client_count": len(rows),
            "clients": [asdict(s) for s in summaries],
            "defaulters": defaulters,
        }
