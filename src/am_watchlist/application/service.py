"""WatchlistService — add/remove are idempotent; only approved auctions can be watched."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.lifecycle import is_publicly_visible
from src.am_auction.domain.repository import AuctionRepositoryProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository
from src.am_common.errors import AuctionNotFoundError
from src.am_watchlist.application.schemas import WatchlistItem, WatchlistResponse, WatchStatus
from src.am_watchlist.infrastructure.persistence import WatchlistRepository


class WatchlistService:
    def __init__(
        self,
        repo: WatchlistRepository | None = None,
        auctions: AuctionRepositoryProtocol | None = None,
    ) -> None:
        self._repo = repo or WatchlistRepository()
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()

    async def add(self, db: AsyncSession, user_id: str, auction_id: str) -> WatchStatus:
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None or not is_publicly_visible(auction):
            raise AuctionNotFoundError(auction_id)
        try:
            await self._repo.add(db, user_id, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WatchStatus(auction_id=auction_id, watching=True)

    async def remove(self, db: AsyncSession, user_id: str, auction_id: str) -> WatchStatus:
        try:
            await self._repo.remove(db, user_id, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WatchStatus(auction_id=auction_id, watching=False)

    async def list_watchlist(self, db: AsyncSession, user_id: str) -> WatchlistResponse:
        entries = await self._repo.list_for_user(db, user_id)
        return WatchlistResponse(items=[WatchlistItem.from_domain(e) for e in entries])

    async def is_watching(self, db: AsyncSession, user_id: str, auction_id: str) -> WatchStatus:
        watching = await self._repo.exists(db, user_id, auction_id)
        return WatchStatus(auction_id=auction_id, watching=watching)
