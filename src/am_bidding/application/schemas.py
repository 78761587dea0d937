"""Pydantic schemas for am_bidding."""

from pydantic import BaseModel, Field

from src.am_bidding.domain.models import Bid, BidHistoryEntry


class PlaceBidRequest(BaseModel):
    amount: int = Field(..., description="Whole currency units; must exceed current price")


class BidOut(BaseModel):
    id: int
    auction_id: str
    bidder_id: str
    amount: int
    bid_time: str

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidOut":
        return cls(
            id=bid.id,
            auction_id=bid.auction_id,
            bidder_id=bid.bidder_id,
            amount=bid.amount,
            bid_time=bid.bid_time.isoformat(),
        )


class BidHistoryItem(BaseModel):
    id: int
    bidder_id: str
    bidder_name: str | None
    amount: int
    bid_time: str

    @classmethod
    def from_domain(cls, entry: BidHistoryEntry) -> "BidHistoryItem":
        return cls(
            id=entry.id,
            bidder_id=entry.bidder_id,
            bidder_name=entry.bidder_name,
            amount=entry.amount,
            bid_time=entry.bid_time.isoformat(),
        )


class BidHistoryResponse(BaseModel):
    auction_id: str
    current_price: int
    bids: list[BidHistoryItem]
