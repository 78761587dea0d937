"""Pydantic schemas for am_admin."""

from pydantic import BaseModel, Field

from src.am_auction.application.schemas import AuctionDetail


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class PendingAuctionsResponse(BaseModel):
    items: list[AuctionDetail]


class AuditEntryOut(BaseModel):
    id: int
    auction_id: str
    auction_title: str | None
    admin_id: str
    action: str
    details: str | None
    created_at: str


class AuditLogResponse(BaseModel):
    items: list[AuditEntryOut]


class DashboardStats(BaseModel):
    total_users: int
    total_auctions: int
    active_auctions: int
    pending_approvals: int
    total_revenue: int


class ActiveBidder(BaseModel):
    user_id: str
    full_name: str | None
    bid_count: int
    total_spent: int


class TopAuction(BaseModel):
    id: str
    title: str
    final_price: int
    bid_count: int
    seller_name: str | None


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    revenue: int
    auction_count: int


class AnalyticsReport(BaseModel):
    total_revenue: int
    total_bids: int
    avg_auction_price: int
    completion_rate: float  # 0.0 - 1.0
    most_active_users: list[ActiveBidder]
    top_auctions: list[TopAuction]
    revenue_by_month: list[MonthlyRevenue]
