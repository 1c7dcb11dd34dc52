# app/api/ocr/main.py
from fastapi import APIRouter, Depends, HTTPException

from ...core.users import Principal, require_reviewer
from ...services.ocr_service import detect_amount
from ..payments.models import OcrRequest, OcrResponse

router = APIRouter()


@router.post("/ocr", response_model=OcrResponse)
def api_detect_amount(
    body: OcrRequest,
    principal: Principal = Depends(require_reviewer),
):
    """Suggest an amount for a payment screenshot. Never authoritative."""
    try:
        result = detect_amount(body.image_url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OcrResponse(amount=result.amount, currency=result.currency)
