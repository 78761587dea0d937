"""AuctionRepository — concrete implementation of AuctionRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Lifecycle mutations (close, cancel) lock the row with SELECT ... FOR UPDATE
first, then run the conditional UPDATE as a separate statement: under READ
COMMITTED each statement takes a fresh snapshot, so the UPDATE's bids
subqueries see any bid committed by the transaction we waited on.

Transaction ownership: the CALLER (application service) commits/rolls back.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.models import Auction, AuctionListing, Category, NewAuction
from src.am_common.errors import InternalError

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

AUCTION_COLUMNS = """
    id, title, description, image_url, category_id, seller_id,
    starting_price, current_price, start_time, end_time,
    status, approval_status, payment_status, winner_id,
    approved_at, approved_by, rejection_reason,
    created_at, updated_at
"""

_INSERT_AUCTION_SQL = text(f"""
    INSERT INTO auctions (title, description, image_url, category_id, seller_id,
                          starting_price, current_price, start_time, end_time,
                          status, approval_status, payment_status)
    VALUES (:title, :description, :image_url, :category_id, CAST(:seller_id AS UUID),
            :starting_price, :starting_price, :start_time, :end_time,
            'active', 'pending', 'unpaid')
    RETURNING {AUCTION_COLUMNS}
""")

_GET_AUCTION_SQL = text(f"""
    SELECT {AUCTION_COLUMNS}
    FROM auctions
    WHERE id = CAST(:auction_id AS UUID)
""")

_LOCK_AUCTION_SQL = text(f"""
    SELECT {AUCTION_COLUMNS}
    FROM auctions
    WHERE id = CAST(:auction_id AS UUID)
    FOR UPDATE
""")

# approval_status = 'approved' is hard-coded: no caller-supplied filter can
# surface pending/rejected rows through this query.
_LIST_PUBLIC_SQL = text("""
    SELECT id, title, image_url, category_id, category_name,
           seller_id, seller_name, starting_price, current_price,
           start_time, end_time, status, bid_count, created_at
    FROM auction_listings
    WHERE approval_status = 'approved'
      AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (CAST(:category_id AS INT) IS NULL OR category_id = CAST(:category_id AS INT))
      AND (CAST(:search AS TEXT) IS NULL OR title ILIKE '%' || CAST(:search AS TEXT) || '%')
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
          OR (
              created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
              AND id < CAST(:cursor_id AS UUID)
          )
      )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_BY_SELLER_SQL = text(f"""
    SELECT {AUCTION_COLUMNS}
    FROM auctions
    WHERE seller_id = CAST(:seller_id AS UUID)
    ORDER BY created_at DESC
""")

_LIST_BID_ON_SQL = text(f"""
    SELECT {AUCTION_COLUMNS}
    FROM auctions a
    WHERE EXISTS (
        SELECT 1 FROM bids b
        WHERE b.auction_id = a.id AND b.bidder_id = CAST(:bidder_id AS UUID)
    )
    ORDER BY a.end_time DESC
""")

_SHIPPED_IDS_SQL = text("""
    SELECT auction_id
    FROM shipments
    WHERE auction_id = ANY(CAST(:auction_ids AS UUID[]))
""")

# Highest bid wins. Amounts are strictly increasing per auction, so the
# highest bid is unique and equals current_price.
_CLOSE_AUCTION_SQL = text(f"""
    UPDATE auctions a
    SET status = 'completed',
        winner_id = (
            SELECT b.bidder_id FROM bids b
            WHERE b.auction_id = a.id
            ORDER BY b.amount DESC, b.bid_time ASC
            LIMIT 1
        ),
        updated_at = NOW()
    WHERE a.id = CAST(:auction_id AS UUID)
      AND a.status = 'active'
      AND a.end_time <= :now
    RETURNING {AUCTION_COLUMNS}
""")

_LIST_EXPIRED_SQL = text("""
    SELECT id
    FROM auctions
    WHERE status = 'active' AND end_time <= :now
    ORDER BY end_time
    LIMIT :limit
""")

_CANCEL_AUCTION_SQL = text(f"""
    UPDATE auctions a
    SET status = 'cancelled', updated_at = NOW()
    WHERE a.id = CAST(:auction_id AS UUID)
      AND a.seller_id = CAST(:seller_id AS UUID)
      AND a.status = 'active'
      AND NOT EXISTS (SELECT 1 FROM bids b WHERE b.auction_id = a.id)
    RETURNING {AUCTION_COLUMNS}
""")

_HAS_BIDS_SQL = text("""
    SELECT EXISTS (SELECT 1 FROM bids WHERE auction_id = CAST(:auction_id AS UUID))
""")

_CATEGORY_EXISTS_SQL = text("SELECT EXISTS (SELECT 1 FROM categories WHERE id = :category_id)")

_LIST_CATEGORIES_SQL = text("SELECT id, name FROM categories ORDER BY name")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _opt_str(value: object) -> str | None:
    return str(value) if value is not None else None


def row_to_auction(row: object) -> Auction:
    return Auction(
        id=str(row.id),  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        category_id=row.category_id,  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        starting_price=row.starting_price,  # type: ignore[attr-defined]
        current_price=row.current_price,  # type: ignore[attr-defined]
        start_time=row.start_time,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        approval_status=row.approval_status,  # type: ignore[attr-defined]
        payment_status=row.payment_status,  # type: ignore[attr-defined]
        winner_id=_opt_str(row.winner_id),  # type: ignore[attr-defined]
        approved_at=row.approved_at,  # type: ignore[attr-defined]
        approved_by=_opt_str(row.approved_by),  # type: ignore[attr-defined]
        rejection_reason=row.rejection_reason,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_listing(row: object) -> AuctionListing:
    return AuctionListing(
        id=str(row.id),  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        category_id=row.category_id,  # type: ignore[attr-defined]
        category_name=row.category_name,  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        seller_name=row.seller_name,  # type: ignore[attr-defined]
        starting_price=row.starting_price,  # type: ignore[attr-defined]
        current_price=row.current_price,  # type: ignore[attr-defined]
        start_time=row.start_time,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        bid_count=int(row.bid_count),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuctionRepository:
    async def create(self, db: AsyncSession, seller_id: str, data: NewAuction) -> Auction:
        result = await db.execute(
            _INSERT_AUCTION_SQL,
            {
                "title": data.title,
                "description": data.description,
                "image_url": data.image_url,
                "category_id": data.category_id,
                "seller_id": seller_id,
                "starting_price": data.starting_price,
                "start_time": data.start_time,
                "end_time": data.end_time,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Auction insert returned no rows — this should never happen")
        return row_to_auction(row)

    async def get_by_id(self, db: AsyncSession, auction_id: str) -> Auction | None:
        result = await db.execute(_GET_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return row_to_auction(row) if row else None

    async def lock_by_id(self, db: AsyncSession, auction_id: str) -> Auction | None:
        result = await db.execute(_LOCK_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return row_to_auction(row) if row else None

    async def list_public(
        self,
        db: AsyncSession,
        status: str | None,
        category_id: int | None,
        search: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[AuctionListing]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_PUBLIC_SQL,
            {
                "status": status,
                "category_id": category_id,
                "search": search,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def list_by_seller(self, db: AsyncSession, seller_id: str) -> list[Auction]:
        result = await db.execute(_LIST_BY_SELLER_SQL, {"seller_id": seller_id})
        return [row_to_auction(row) for row in result.fetchall()]

    async def list_bid_on(self, db: AsyncSession, bidder_id: str) -> list[Auction]:
        result = await db.execute(_LIST_BID_ON_SQL, {"bidder_id": bidder_id})
        return [row_to_auction(row) for row in result.fetchall()]

    async def shipped_auction_ids(self, db: AsyncSession, auction_ids: list[str]) -> set[str]:
        if not auction_ids:
            return set()
        result = await db.execute(_SHIPPED_IDS_SQL, {"auction_ids": auction_ids})
        return {str(row.auction_id) for row in result.fetchall()}

    async def close(self, db: AsyncSession, auction_id: str, now: datetime) -> Auction | None:
        """Lock, then finalise winner. None when the row did not qualify."""
        await db.execute(_LOCK_AUCTION_SQL, {"auction_id": auction_id})
        result = await db.execute(_CLOSE_AUCTION_SQL, {"auction_id": auction_id, "now": now})
        row = result.fetchone()
        return row_to_auction(row) if row else None

    async def list_expired_ids(self, db: AsyncSession, now: datetime, limit: int) -> list[str]:
        result = await db.execute(_LIST_EXPIRED_SQL, {"now": now, "limit": limit})
        return [str(row.id) for row in result.fetchall()]

    async def cancel(self, db: AsyncSession, auction_id: str, seller_id: str) -> Auction | None:
        await db.execute(_LOCK_AUCTION_SQL, {"auction_id": auction_id})
        result = await db.execute(
            _CANCEL_AUCTION_SQL, {"auction_id": auction_id, "seller_id": seller_id}
        )
        row = result.fetchone()
        return row_to_auction(row) if row else None

    async def has_bids(self, db: AsyncSession, auction_id: str) -> bool:
        result = await db.execute(_HAS_BIDS_SQL, {"auction_id": auction_id})
        return bool(result.scalar())

    async def category_exists(self, db: AsyncSession, category_id: int) -> bool:
        result = await db.execute(_CATEGORY_EXISTS_SQL, {"category_id": category_id})
        return bool(result.scalar())

    async def list_categories(self, db: AsyncSession) -> list[Category]:
        result = await db.execute(_LIST_CATEGORIES_SQL)
        return [Category(id=row.id, name=row.name) for row in result.fetchall()]
