# app/services/ocr_service.py
"""
Amount detection for payment screenshots.

This is a stand-in: it does not read the image and returns a random amount
in rupees. Reviewers use it to pre-fill the approval form and may always
override the value.
"""
import logging
import random
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_AMOUNT = 100
MAX_AMOUNT = 49999


@dataclass
class OcrResult:
    amount: float
    currency: str = "INR"


def detect_amount(image_url: str, rng: random.Random | None = None) -> OcrResult:
    if not image_url or not image_url.strip():
        raise ValueError("An image URL is required.")
    rng = rng or random
    amount = rng.randint(MIN_AMOUNT, MAX_AMOUNT)
    logger.info(f"OCR stub returned {amount} for {image_url}")
    return OcrResult(amount=float(amount))
