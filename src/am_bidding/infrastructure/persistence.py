"""BidRepository — the atomic bid-acceptance path.

accept() is a single conditional UPDATE: the `current_price < :amount`
check and the price write happen under the row lock PostgreSQL takes for the
UPDATE. A concurrent bidder blocks on that lock; when it resumes, READ
COMMITTED re-evaluates the WHERE clause against the committed price, so the
lower of two racing bids matches zero rows instead of overwriting.

record() stamps bid_time with clock_timestamp(), read after the row lock is
held, so bid_time is monotonic per auction in commit order (NOW() is the
transaction start time and would not be).

Transaction ownership: the CALLER commits both statements together.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_bidding.domain.models import Bid, BidHistoryEntry
from src.am_common.errors import InternalError

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_ACCEPT_BID_SQL = text("""
    UPDATE auctions
    SET current_price = :amount,
        updated_at = NOW()
    WHERE id = CAST(:auction_id AS UUID)
      AND approval_status = 'approved'
      AND status = 'active'
      AND start_time <= :now
      AND end_time > :now
      AND seller_id <> CAST(:bidder_id AS UUID)
      AND current_price < :amount
    RETURNING current_price
""")

_INSERT_BID_SQL = text("""
    INSERT INTO bids (auction_id, bidder_id, amount, bid_time)
    VALUES (CAST(:auction_id AS UUID), CAST(:bidder_id AS UUID), :amount, clock_timestamp())
    RETURNING id, auction_id, bidder_id, amount, bid_time
""")

_LIST_HISTORY_SQL = text("""
    SELECT b.id, b.bidder_id, p.full_name AS bidder_name, b.amount, b.bid_time
    FROM bids b
    JOIN auctions a ON a.id = b.auction_id
    LEFT JOIN profiles p ON p.user_id = b.bidder_id
    WHERE b.auction_id = CAST(:auction_id AS UUID)
      AND a.approval_status = 'approved'
    ORDER BY b.bid_time DESC, b.id DESC
    LIMIT :limit
""")


def _row_to_bid(row: object) -> Bid:
    return Bid(
        id=row.id,  # type: ignore[attr-defined]
        auction_id=str(row.auction_id),  # type: ignore[attr-defined]
        bidder_id=str(row.bidder_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        bid_time=row.bid_time,  # type: ignore[attr-defined]
    )


class BidRepository:
    async def accept(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        amount: int,
        now: datetime,
    ) -> bool:
        """Compare-and-set current_price. False when any precondition failed."""
        result = await db.execute(
            _ACCEPT_BID_SQL,
            {"auction_id": auction_id, "bidder_id": bidder_id, "amount": amount, "now": now},
        )
        return result.fetchone() is not None

    async def record(
        self, db: AsyncSession, auction_id: str, bidder_id: str, amount: int
    ) -> Bid:
        result = await db.execute(
            _INSERT_BID_SQL,
            {"auction_id": auction_id, "bidder_id": bidder_id, "amount": amount},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Bid insert returned no rows — this should never happen")
        return _row_to_bid(row)

    async def list_history(
        self, db: AsyncSession, auction_id: str, limit: int
    ) -> list[BidHistoryEntry]:
        result = await db.execute(_LIST_HISTORY_SQL, {"auction_id": auction_id, "limit": limit})
        return [
            BidHistoryEntry(
                id=row.id,
                bidder_id=str(row.bidder_id),
                bidder_name=row.bidder_name,
                amount=row.amount,
                bid_time=row.bid_time,
            )
            for row in result.fetchall()
        ]
