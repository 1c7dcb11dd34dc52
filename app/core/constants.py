"""
Centralized constants.
Removes "magic strings" and gives strong typing to common values.
"""

from enum import Enum, unique


@unique
class UserRole(str, Enum):
    """Roles a PayTrack user can have."""

    ADMIN = "admin"
    SUBADMIN = "subadmin"
    CLIENT = "client"


@unique
class PaymentStatus(str, Enum):
    """Payment lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"


@unique
class PaymentTag(str, Enum):
    """How a payment was created."""

    REGULAR = "regular"
    PREPAID = "prepaid"


@unique
class AuditAction(str, Enum):
    """Action names written to the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    TERMINATE = "TERMINATE"
    PROMOTE = "PROMOTE"
