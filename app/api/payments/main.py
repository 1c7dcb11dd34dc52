import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.constants import AuditAction, PaymentStatus
from ...core.users import Principal, get_principal, require_client, require_reviewer
from ...db.engine_sync import get_sync_session
from ...services.payment_service import PaymentService, QuotaExceededError
from .models import (
    Payment,
    PaymentApprove,
    PaymentCreate,
    PaymentReject,
    PaymentRequestCreate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_payment_service(session: Session = Depends(get_sync_session)) -> PaymentService:
    return PaymentService(session)


def _raise_http(e: Exception):
    if isinstance(e, QuotaExceededError):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    if isinstance(e, PermissionError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, FileNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/payments", response_model=list[Payment])
def api_get_payments(
    status: Optional[PaymentStatus] = None,
    client_id: Optional[uuid.UUID] = None,
    service: PaymentService = Depends(get_payment_service),
    principal: Principal = Depends(get_principal),
):
    try:
        return service.list_payments(principal, status=status, client_id=client_id)
    except (PermissionError, FileNotFoundError) as e:
        _raise_http(e)


@router.post("/payments", response_model=Payment, status_code=status.HTTP_201_CREATED)
def api_submit_payment(
    payment: PaymentCreate,
    service: PaymentService = Depends(get_payment_service),
    principal: Principal = Depends(require_client),
):
    """Client self-submission. Counts towards the daily quota."""
    try:
        return service.submit_claim(
            principal,
            payment.amount,
            payment.to_period(),
            screenshot_url=payment.screenshot_url,
            description=payment.description,
        )
    except (ValueError, PermissionError) as e:
        _raise_http(e)


@router.post("/payments/requests", response_model=list[Payment], status_code=status.HTTP_201_CREATED)
def api_create_payment_request(
    payment_request: PaymentRequestCreate,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
    principal: Principal = Depends(require_reviewer),
):
    """
    Create a payment request for a client in scope. A prepaid request creates
    one scheduled payment per month; they turn pending when their month comes.
    """
    if payment_request.prepaid and not payment_request.scheduled_items():
        raise HTTPException(status_code=400, detail="A prepaid request needs a duration or items.")

    try:
        payments = service.create_request(
            principal,
            payment_request.client_id,
            payment_request.to_period(),
            amount=payment_request.amount,
            description=payment_request.description,
            prepaid_items=payment_request.scheduled_items(),
        )
    except (ValueError, PermissionError, FileNotFoundError) as e:
        _raise_http(e)

    log_action(
        AuditAction.CREATE,
        "payment",
        ",".join(str(p.id) for p in payments),
        principal=principal,
        request=request,
        details={"client_id": str(payment_request.client_id), "count": len(payments)},
    )
    return payments


@router.post("/payments/{payment_id}/approve", response_model=Payment)
def api_approve_payment(
    payment_id: uuid.UUID,
    body: PaymentApprove,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
    principal: Principal = Depends(require_reviewer),
):
    try:
        payment = service.approve_payment(principal, payment_id, body.amount)
    except (ValueError, PermissionError, FileNotFoundError) as e:
        _raise_http(e)

    log_action(
        AuditAction.APPROVE,
        "payment",
        str(payment_id),
        principal=principal,
        request=request,
        details={"amount": payment.amount, "month": payment.month},
    )
    return payment


@router.post("/payments/{payment_id}/reject", response_model=Payment)
def api_reject_payment(
    payment_id: uuid.UUID,
    body: PaymentReject,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
    principal: Principal = Depends(require_reviewer),
):
    try:
        payment = service.reject_payment(principal, payment_id, body.notes)
    except (ValueError, PermissionError, FileNotFoundError) as e:
        _raise_http(e)

    log_action(
        AuditAction.REJECT,
        "payment",
        str(payment_id),
        principal=principal,
        request=request,
        details={"notes": payment.notes},
    )
    return payment
