"""Pydantic schemas for am_payment."""

import uuid

from pydantic import BaseModel

from src.am_payment.domain.models import Payment


class CreateOrderRequest(BaseModel):
    auction_id: uuid.UUID


class CreateOrderResponse(BaseModel):
    order_id: str
    key_id: str
    amount: int  # minor units, as the checkout widget expects
    currency: str


class PaymentOut(BaseModel):
    id: str
    auction_id: str
    winner_id: str
    amount: int
    amount_minor: int
    currency: str
    status: str
    provider_order_id: str
    provider_payment_id: str | None
    created_at: str
    paid_at: str | None

    @classmethod
    def from_domain(cls, p: Payment) -> "PaymentOut":
        return cls(
            id=p.id,
            auction_id=p.auction_id,
            winner_id=p.winner_id,
            amount=p.amount,
            amount_minor=p.amount_minor,
            currency=p.currency,
            status=p.status,
            provider_order_id=p.provider_order_id,
            provider_payment_id=p.provider_payment_id,
            created_at=p.created_at.isoformat(),
            paid_at=p.paid_at.isoformat() if p.paid_at else None,
        )
