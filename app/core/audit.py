# app/core/audit.py
"""
Centralized audit logging.
Writes every security-relevant action (user creation and deletion, payment
reviews, subadmin termination) as one JSON line to <LOG_DIR>/audit.log.
"""
import json
import logging
import os
from typing import Optional

from fastapi import Request

from app.core.config import settings
from app.utils.clock import utc_now

AUDIT_LOG_FILE = os.path.join(settings.log_dir, "audit.log")

# Dedicated audit logger
audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False  # Don't duplicate to root logger

logger = logging.getLogger(__name__)


def _ensure_handler() -> None:
    if audit_logger.handlers:
        return
    os.makedirs(settings.log_dir, exist_ok=True)
    file_handler = logging.FileHandler(AUDIT_LOG_FILE, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(file_handler)


def client_ip(request: Optional[Request]) -> str:
    if request is None:
        return "unknown"
    # Reverse proxy header first
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def log_action(
    action: str,
    resource_type: str,
    resource_id: str,
    principal=None,
    request: Optional[Request] = None,
    details: Optional[dict] = None,
    status: str = "success",
) -> None:
    """
    Log a security-relevant action to the audit log.

    Args:
        action: The action performed (e.g., "DELETE", "APPROVE", "CREATE")
        resource_type: Type of resource affected ("client", "subadmin", "payment")
        resource_id: Identifier of the affected resource
        principal: The Principal who performed the action (optional)
        request: FastAPI Request object to extract the IP (optional)
        details: Additional context dictionary (optional)
        status: "success" or "failure"
    """
    _ensure_handler()
    log_entry = {
        "timestamp": utc_now().isoformat(),
        "action": str(getattr(action, "value", action)).upper(),
        "resource_type": resource_type,
        "resource_id": str(resource_id),
        "user": principal.email if principal else "anonymous",
        "user_role": principal.role if principal else "unknown",
        "ip_address": client_ip(request),
        "status": status,
    }

    if details:
        log_entry["details"] = details

    audit_logger.info(json.dumps(log_entry, ensure_ascii=False, default=str))
    logger.info(
        f"📝 [AUDIT] {log_entry['action']} {resource_type}/{resource_id} by {log_entry['user']}"
    )
