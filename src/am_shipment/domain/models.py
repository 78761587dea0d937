"""Shipment domain models."""

from dataclasses import dataclass
from datetime import datetime

DEFAULT_SHIPMENT_STATUS = "Shipped"


@dataclass
class Shipment:
    id: str
    auction_id: str
    seller_id: str
    winner_id: str
    shipping_address: str | None
    carrier: str
    tracking_number: str
    status: str
    created_at: datetime
    updated_at: datetime


def format_address(*parts: str | None) -> str | None:
    """Join the non-blank address parts with ', '. None when nothing is left."""
    cleaned = [p.strip() for p in parts if p and p.strip()]
    return ", ".join(cleaned) if cleaned else None
