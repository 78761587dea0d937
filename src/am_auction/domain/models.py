"""Domain models for am_auction — pure dataclasses, no SQLAlchemy dependency.

Prices are whole currency units (int). IDs are UUID strings.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Auction:
    id: str
    title: str
    description: str | None
    image_url: str | None
    category_id: int | None
    seller_id: str
    starting_price: int
    current_price: int
    start_time: datetime
    end_time: datetime
    status: str              # active | completed | cancelled
    approval_status: str     # pending | approved | rejected
    payment_status: str      # unpaid | pending | paid
    winner_id: str | None
    approved_at: datetime | None
    approved_by: str | None
    rejection_reason: str | None
    created_at: datetime
    updated_at: datetime


@dataclass
class AuctionListing:
    """Row of the auction_listings view (buyer-facing, approved only)."""

    id: str
    title: str
    image_url: str | None
    category_id: int | None
    category_name: str | None
    seller_id: str
    seller_name: str | None
    starting_price: int
    current_price: int
    start_time: datetime
    end_time: datetime
    status: str
    bid_count: int
    created_at: datetime


@dataclass
class NewAuction:
    """Seller input for submit_for_approval, already validated."""

    title: str
    description: str | None
    image_url: str | None
    category_id: int | None
    starting_price: int
    start_time: datetime
    end_time: datetime


@dataclass
class Category:
    id: int
    name: str
