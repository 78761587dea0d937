"""Global enums — must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class AuctionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuctionPaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class AuditAction(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class WebhookEvent(str, Enum):
    PAYMENT_CAPTURED = "payment.captured"
