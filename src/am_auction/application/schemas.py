"""Pydantic schemas for am_auction API requests/responses.

Cursor format for listings (UUID PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<auction_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from src.am_auction.domain.models import Auction, AuctionListing, Category
from src.am_common.money import format_amount

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last: AuctionListing) -> str:
    """Encode composite cursor from the last listing in a page."""
    payload = {"ts": last.created_at.isoformat(), "id": last.id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, auction_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        ts, auction_id = str(data["ts"]), str(data["id"])
        # Both halves must be usable as SQL parameters, not just present
        datetime.fromisoformat(ts)
        uuid.UUID(auction_id)
    except Exception:
        return None, None
    return ts, auction_id


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateAuctionRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, max_length=2048)
    category_id: int | None = None
    starting_price: int = Field(..., gt=0, description="Whole currency units")
    start_time: datetime | None = Field(None, description="Defaults to now")
    end_time: datetime


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class AuctionListItem(BaseModel):
    id: str
    title: str
    image_url: str | None
    category_id: int | None
    category_name: str | None
    seller_id: str
    seller_name: str | None
    starting_price: int
    current_price: int
    current_price_display: str
    start_time: str
    end_time: str
    status: str
    bid_count: int

    @classmethod
    def from_domain(cls, a: AuctionListing) -> "AuctionListItem":
        return cls(
            id=a.id,
            title=a.title,
            image_url=a.image_url,
            category_id=a.category_id,
            category_name=a.category_name,
            seller_id=a.seller_id,
            seller_name=a.seller_name,
            starting_price=a.starting_price,
            current_price=a.current_price,
            current_price_display=format_amount(a.current_price),
            start_time=a.start_time.isoformat(),
            end_time=a.end_time.isoformat(),
            status=a.status,
            bid_count=a.bid_count,
        )


class AuctionListResponse(BaseModel):
    items: list[AuctionListItem]
    next_cursor: str | None
    has_more: bool


class AuctionDetail(BaseModel):
    id: str
    title: str
    description: str | None
    image_url: str | None
    category_id: int | None
    seller_id: str
    starting_price: int
    current_price: int
    current_price_display: str
    start_time: str
    end_time: str
    status: str
    approval_status: str
    payment_status: str
    winner_id: str | None
    rejection_reason: str | None
    created_at: str

    @classmethod
    def from_domain(cls, a: Auction) -> "AuctionDetail":
        return cls(
            id=a.id,
            title=a.title,
            description=a.description,
            image_url=a.image_url,
            category_id=a.category_id,
            seller_id=a.seller_id,
            starting_price=a.starting_price,
            current_price=a.current_price,
            current_price_display=format_amount(a.current_price),
            start_time=a.start_time.isoformat(),
            end_time=a.end_time.isoformat(),
            status=a.status,
            approval_status=a.approval_status,
            payment_status=a.payment_status,
            winner_id=a.winner_id,
            rejection_reason=a.rejection_reason,
            created_at=a.created_at.isoformat(),
        )


class MyAuctionItem(AuctionDetail):
    has_shipment: bool


class MyAuctionsResponse(BaseModel):
    selling: list[MyAuctionItem]
    bidding: list[MyAuctionItem]


class CloseExpiredResponse(BaseModel):
    closed: list[AuctionDetail]


class CategoryOut(BaseModel):
    id: int
    name: str

    @classmethod
    def from_domain(cls, c: Category) -> "CategoryOut":
        return cls(id=c.id, name=c.name)
