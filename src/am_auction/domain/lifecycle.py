"""Auction lifecycle rules — pure functions over the Auction dataclass.

The SQL statements that mutate auctions repeat these predicates in their
WHERE clauses (the database is the arbiter under concurrency); these
functions classify *why* a conditional update matched zero rows and gate
reads that never hit a conditional update.

    approval:  pending ──approve──▶ approved
                      └─reject───▶ rejected (terminal)
    status:    active ──close (end_time passed)──▶ completed
                      └─cancel (seller, no bids)─▶ cancelled
    payment:   unpaid ──order created──▶ pending ──webhook──▶ paid
"""

from datetime import datetime

from src.am_auction.domain.models import Auction
from src.am_common.enums import ApprovalStatus, AuctionPaymentStatus, AuctionStatus


def not_biddable_reason(auction: Auction, now: datetime) -> str | None:
    """None when bids are accepted right now, otherwise a human-readable reason."""
    if auction.approval_status != ApprovalStatus.APPROVED:
        return f"approval status is {auction.approval_status}"
    if auction.status != AuctionStatus.ACTIVE:
        return f"auction is {auction.status}"
    if now < auction.start_time:
        return "auction has not started yet"
    if now >= auction.end_time:
        return "auction has ended"
    return None


def not_closable_reason(auction: Auction, now: datetime) -> str | None:
    if auction.status != AuctionStatus.ACTIVE:
        return f"auction is already {auction.status}"
    if now < auction.end_time:
        return "end time has not been reached"
    return None


def is_publicly_visible(auction: Auction) -> bool:
    return auction.approval_status == ApprovalStatus.APPROVED


def can_view(auction: Auction, user_id: str | None, is_admin: bool) -> bool:
    """Pending/rejected auctions are visible to their seller and to admins only."""
    if is_publicly_visible(auction) or is_admin:
        return True
    return user_id is not None and user_id == auction.seller_id


def is_ready_to_ship(auction: Auction) -> bool:
    return (
        auction.winner_id is not None
        and auction.payment_status == AuctionPaymentStatus.PAID
    )
