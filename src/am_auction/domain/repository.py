"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.models import Auction, AuctionListing, Category, NewAuction


class AuctionRepositoryProtocol(Protocol):
    async def create(
        self, db: AsyncSession, seller_id: str, data: NewAuction
    ) -> Auction: ...

    async def get_by_id(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def lock_by_id(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def list_public(
        self,
        db: AsyncSession,
        status: str | None,
        category_id: int | None,
        search: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[AuctionListing]: ...

    async def list_by_seller(self, db: AsyncSession, seller_id: str) -> list[Auction]: ...

    async def list_bid_on(self, db: AsyncSession, bidder_id: str) -> list[Auction]: ...

    async def shipped_auction_ids(
        self, db: AsyncSession, auction_ids: list[str]
    ) -> set[str]: ...

    async def close(
        self, db: AsyncSession, auction_id: str, now: datetime
    ) -> Auction | None: ...

    async def list_expired_ids(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]: ...

    async def cancel(
        self, db: AsyncSession, auction_id: str, seller_id: str
    ) -> Auction | None: ...

    async def has_bids(self, db: AsyncSession, auction_id: str) -> bool: ...

    async def category_exists(self, db: AsyncSession, category_id: int) -> bool: ...

    async def list_categories(self, db: AsyncSession) -> list[Category]: ...
