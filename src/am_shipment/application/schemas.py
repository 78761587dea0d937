"""Pydantic schemas for am_shipment."""

from pydantic import BaseModel, Field

from src.am_shipment.domain.models import DEFAULT_SHIPMENT_STATUS, Shipment


class UpsertShipmentRequest(BaseModel):
    tracking_number: str = Field(..., max_length=100)
    carrier: str = Field(..., max_length=100)
    shipping_address: str | None = Field(
        None, max_length=1000, description="Defaults to the winner's profile address"
    )
    status: str = Field(DEFAULT_SHIPMENT_STATUS, max_length=50)


class ShipmentOut(BaseModel):
    id: str
    auction_id: str
    seller_id: str
    winner_id: str
    shipping_address: str | None
    carrier: str
    tracking_number: str
    status: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, s: Shipment) -> "ShipmentOut":
        return cls(
            id=s.id,
            auction_id=s.auction_id,
            seller_id=s.seller_id,
            winner_id=s.winner_id,
            shipping_address=s.shipping_address,
            carrier=s.carrier,
            tracking_number=s.tracking_number,
            status=s.status,
            created_at=s.created_at.isoformat(),
            updated_at=s.updated_at.isoformat(),
        )
