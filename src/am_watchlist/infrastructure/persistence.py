"""WatchlistRepository — (user_id, auction_id) pairs, unique per user."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_watchlist.domain.models import WatchlistEntry

_ADD_SQL = text("""
    INSERT INTO watchlist (user_id, auction_id)
    VALUES (CAST(:user_id AS UUID), CAST(:auction_id AS UUID))
    ON CONFLICT (user_id, auction_id) DO NOTHING
""")

_REMOVE_SQL = text("""
    DELETE FROM watchlist
    WHERE user_id = CAST(:user_id AS UUID)
      AND auction_id = CAST(:auction_id AS UUID)
""")

_EXISTS_SQL = text("""
    SELECT 1 FROM watchlist
    WHERE user_id = CAST(:user_id AS UUID)
      AND auction_id = CAST(:auction_id AS UUID)
""")

_LIST_SQL = text("""
    SELECT a.id AS auction_id, a.title, a.image_url, a.current_price, a.end_time,
           a.status, w.created_at AS added_at
    FROM watchlist w
    JOIN auctions a ON a.id = w.auction_id
    WHERE w.user_id = CAST(:user_id AS UUID)
      AND a.approval_status = 'approved'
    ORDER BY w.created_at DESC, w.id DESC
""")


class WatchlistRepository:
    async def add(self, db: AsyncSession, user_id: str, auction_id: str) -> None:
        await db.execute(_ADD_SQL, {"user_id": user_id, "auction_id": auction_id})

    async def remove(self, db: AsyncSession, user_id: str, auction_id: str) -> None:
        await db.execute(_REMOVE_SQL, {"user_id": user_id, "auction_id": auction_id})

    async def exists(self, db: AsyncSession, user_id: str, auction_id: str) -> bool:
        result = await db.execute(_EXISTS_SQL, {"user_id": user_id, "auction_id": auction_id})
        return result.fetchone() is not None

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[WatchlistEntry]:
        result = await db.execute(_LIST_SQL, {"user_id": user_id})
        return [
            WatchlistEntry(
                auction_id=str(row.auction_id),
                title=row.title,
                image_url=row.image_url,
                current_price=row.current_price,
                end_time=row.end_time,
                status=row.status,
                added_at=row.added_at,
            )
            for row in result.fetchall()
        ]
