"""Payment domain models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Payment:
    id: str
    auction_id: str
    winner_id: str
    amount: int
    amount_minor: int
    currency: str
    status: str
    provider_order_id: str
    provider_payment_id: str | None
    created_at: datetime
    paid_at: datetime | None


@dataclass(frozen=True)
class ProviderOrder:
    """What the payment provider returned for a created order."""

    order_id: str
    amount_minor: int
    currency: str


@dataclass(frozen=True)
class CapturedPayment:
    """The parts of a payment.captured webhook the settlement path needs."""

    order_id: str
    payment_id: str | None
