"""Domain models for am_bidding — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Bid:
    """An accepted bid. Bids are append-only; instances are never mutated."""

    id: int
    auction_id: str
    bidder_id: str
    amount: int
    bid_time: datetime


@dataclass
class BidHistoryEntry:
    id: int
    bidder_id: str
    bidder_name: str | None
    amount: int
    bid_time: datetime
