"""Admin application service: approval decisions, audit log, dashboard figures."""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.application.schemas import (
    ActiveBidder,
    AnalyticsReport,
    AuditEntryOut,
    AuditLogResponse,
    DashboardStats,
    MonthlyRevenue,
    PendingAuctionsResponse,
    TopAuction,
)
from src.am_auction.application.schemas import AuctionDetail
from src.am_auction.infrastructure.persistence import AUCTION_COLUMNS, row_to_auction
from src.am_common.enums import AuditAction
from src.am_common.errors import AlreadyDecidedError, AuctionNotFoundError

logger = logging.getLogger("am.admin")

# The pending check lives in the WHERE clause: of two admins deciding at once,
# exactly one UPDATE matches.
_APPROVE_SQL = text(f"""
    UPDATE auctions
    SET approval_status = 'approved',
        approved_at = NOW(),
        approved_by = CAST(:admin_id AS UUID),
        rejection_reason = NULL,
        updated_at = NOW()
    WHERE id = CAST(:auction_id AS UUID)
      AND approval_status = 'pending'
    RETURNING {AUCTION_COLUMNS}
""")
_REJECT_SQL = text(f"""
    UPDATE auctions
    SET approval_status = 'rejected',
        rejection_reason = :reason,
        updated_at = NOW()
    WHERE id = CAST(:auction_id AS UUID)
      AND approval_status = 'pending'
    RETURNING {AUCTION_COLUMNS}
""")
_GET_APPROVAL_SQL = text(
    "SELECT approval_status FROM auctions WHERE id = CAST(:auction_id AS UUID)"
)
_INSERT_AUDIT_SQL = text("""
    INSERT INTO admin_audit_log (auction_id, admin_id, action, details)
    VALUES (CAST(:auction_id AS UUID), CAST(:admin_id AS UUID), :action, :details)
""")
_LIST_PENDING_SQL = text(f"""
    SELECT {AUCTION_COLUMNS}
    FROM auctions
    WHERE approval_status = 'pending'
    ORDER BY created_at ASC
    LIMIT :limit
""")
_AUDIT_LOG_SQL = text("""
    SELECT l.id, l.auction_id, a.title AS auction_title, l.admin_id, l.action,
           l.details, l.created_at
    FROM admin_audit_log l
    LEFT JOIN auctions a ON a.id = l.auction_id
    WHERE CAST(:auction_id AS UUID) IS NULL OR l.auction_id = CAST(:auction_id AS UUID)
    ORDER BY l.created_at DESC, l.id DESC
    LIMIT :limit
""")
_DASHBOARD_SQL = text("""
    SELECT
        (SELECT COUNT(*) FROM users) AS total_users,
        (SELECT COUNT(*) FROM auctions) AS total_auctions,
        (SELECT COUNT(*) FROM auctions
          WHERE status = 'active' AND approval_status = 'approved') AS active_auctions,
        (SELECT COUNT(*) FROM auctions WHERE approval_status = 'pending') AS pending_approvals,
        (SELECT COALESCE(SUM(current_price), 0) FROM auctions
          WHERE status = 'completed' AND approval_status = 'approved') AS total_revenue
""")
_TOTALS_SQL = text("""
    SELECT
        (SELECT COALESCE(SUM(current_price), 0) FROM auctions
          WHERE status = 'completed' AND approval_status = 'approved') AS total_revenue,
        (SELECT COUNT(*) FROM bids) AS total_bids,
        (SELECT COALESCE(ROUND(AVG(current_price)), 0) FROM auctions
          WHERE status = 'completed' AND approval_status = 'approved') AS avg_price,
        (SELECT COUNT(*) FROM auctions
          WHERE approval_status = 'approved' AND status = 'completed') AS completed,
        (SELECT COUNT(*) FROM auctions
          WHERE approval_status = 'approved'
            AND (status = 'cancelled' OR (status = 'active' AND end_time <= NOW()))
        ) AS not_completed
""")
_MOST_ACTIVE_SQL = text("""
    SELECT b.bidder_id AS user_id, p.full_name, COUNT(*) AS bid_count,
           COALESCE((
               SELECT SUM(w.current_price) FROM auctions w
               WHERE w.winner_id = b.bidder_id AND w.status = 'completed'
           ), 0) AS total_spent
    FROM bids b
    LEFT JOIN profiles p ON p.user_id = b.bidder_id
    GROUP BY b.bidder_id, p.full_name
    ORDER BY bid_count DESC, b.bidder_id
    LIMIT :limit
""")
_TOP_AUCTIONS_SQL = text("""
    SELECT id, title, current_price AS final_price, bid_count, seller_name
    FROM auction_listings
    WHERE status = 'completed' AND approval_status = 'approved'
    ORDER BY current_price DESC, bid_count DESC
    LIMIT :limit
""")
_MONTHLY_REVENUE_SQL = text("""
    SELECT to_char(date_trunc('month', end_time), 'YYYY-MM') AS month,
           COALESCE(SUM(current_price), 0) AS revenue,
           COUNT(*) AS auction_count
    FROM auctions
    WHERE status = 'completed' AND approval_status = 'approved'
      AND end_time >= date_trunc('month', NOW())
                      - make_interval(months => CAST(:months_back AS INT) - 1)
    GROUP BY 1
    ORDER BY 1
""")


class AdminService:
    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    async def _decide(
        self,
        db: AsyncSession,
        sql: Any,
        params: dict[str, Any],
        action: AuditAction,
        details: str | None,
    ) -> AuctionDetail:
        auction_id = params["auction_id"]
        try:
            row = (await db.execute(sql, params)).fetchone()
            if row is None:
                current = (
                    await db.execute(_GET_APPROVAL_SQL, {"auction_id": auction_id})
                ).fetchone()
                if current is None:
                    raise AuctionNotFoundError(auction_id)
                raise AlreadyDecidedError(auction_id, current.approval_status)
            await db.execute(
                _INSERT_AUDIT_SQL,
                {
                    "auction_id": auction_id,
                    "admin_id": params["admin_id"],
                    "action": action.value,
                    "details": details,
                },
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Auction %s %s by admin %s", auction_id, action.value, params["admin_id"])
        return AuctionDetail.from_domain(row_to_auction(row))

    async def approve(self, db: AsyncSession, auction_id: str, admin_id: str) -> AuctionDetail:
        return await self._decide(
            db,
            _APPROVE_SQL,
            {"auction_id": auction_id, "admin_id": admin_id},
            AuditAction.APPROVED,
            None,
        )

    async def reject(
        self, db: AsyncSession, auction_id: str, admin_id: str, reason: str
    ) -> AuctionDetail:
        reason = reason.strip()
        return await self._decide(
            db,
            _REJECT_SQL,
            {"auction_id": auction_id, "admin_id": admin_id, "reason": reason},
            AuditAction.REJECTED,
            reason,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_pending(self, db: AsyncSession, limit: int = 100) -> PendingAuctionsResponse:
        rows = (await db.execute(_LIST_PENDING_SQL, {"limit": limit})).fetchall()
        return PendingAuctionsResponse(
            items=[AuctionDetail.from_domain(row_to_auction(r)) for r in rows]
        )

    async def audit_log(
        self, db: AsyncSession, auction_id: str | None = None, limit: int = 100
    ) -> AuditLogResponse:
        rows = (
            await db.execute(_AUDIT_LOG_SQL, {"auction_id": auction_id, "limit": limit})
        ).fetchall()
        return AuditLogResponse(
            items=[
                AuditEntryOut(
                    id=r.id,
                    auction_id=str(r.auction_id),
                    auction_title=r.auction_title,
                    admin_id=str(r.admin_id),
                    action=r.action,
                    details=r.details,
                    created_at=r.created_at.isoformat(),
                )
                for r in rows
            ]
        )

    async def dashboard_stats(self, db: AsyncSession) -> DashboardStats:
        row = (await db.execute(_DASHBOARD_SQL)).one()
        return DashboardStats(
            total_users=int(row.total_users),
            total_auctions=int(row.total_auctions),
            active_auctions=int(row.active_auctions),
            pending_approvals=int(row.pending_approvals),
            total_revenue=int(row.total_revenue),
        )

    async def analytics(
        self, db: AsyncSession, limit: int = 10, months_back: int = 12
    ) -> AnalyticsReport:
        totals = (await db.execute(_TOTALS_SQL)).one()
        ended = int(totals.completed) + int(totals.not_completed)
        completion_rate = int(totals.completed) / ended if ended else 0.0

        bidders = (await db.execute(_MOST_ACTIVE_SQL, {"limit": limit})).fetchall()
        top = (await db.execute(_TOP_AUCTIONS_SQL, {"limit": limit})).fetchall()
        monthly = (
            await db.execute(_MONTHLY_REVENUE_SQL, {"months_back": months_back})
        ).fetchall()

        return AnalyticsReport(
            total_revenue=int(totals.total_revenue),
            total_bids=int(totals.total_bids),
            avg_auction_price=int(totals.avg_price),
            completion_rate=round(completion_rate, 4),
            most_active_users=[
                ActiveBidder(
                    user_id=str(r.user_id),
                    full_name=r.full_name,
                    bid_count=int(r.bid_count),
                    total_spent=int(r.total_spent),
                )
                for r in bidders
            ],
            top_auctions=[
                TopAuction(
                    id=str(r.id),
                    title=r.title,
                    final_price=int(r.final_price),
                    bid_count=int(r.bid_count),
                    seller_name=r.seller_name,
                )
                for r in top
            ],
            revenue_by_month=[
                MonthlyRevenue(
                    month=r.month, revenue=int(r.revenue), auction_count=int(r.auction_count)
                )
                for r in monthly
            ],
        )
