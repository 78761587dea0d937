"""AuctionApplicationService — submission, buyer/seller reads, close and cancel.

Mutating methods commit once and roll back on any exception; read methods
run without an explicit transaction.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.application.schemas import (
    AuctionDetail,
    AuctionListItem,
    AuctionListResponse,
    CategoryOut,
    CreateAuctionRequest,
    MyAuctionItem,
    MyAuctionsResponse,
    cursor_decode,
    cursor_encode,
)
from src.am_auction.domain.lifecycle import can_view, not_closable_reason
from src.am_auction.domain.models import Auction, NewAuction
from src.am_auction.domain.repository import AuctionRepositoryProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository
from src.am_common.datetime_utils import as_utc, utc_now
from src.am_common.enums import AuctionStatus
from src.am_common.errors import (
    AuctionNotCancellableError,
    AuctionNotClosableError,
    AuctionNotFoundError,
    ForbiddenError,
    ValidationError,
)

logger = logging.getLogger("am.auction")


class AuctionApplicationService:
    def __init__(
        self,
        repo: AuctionRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: AuctionRepositoryProtocol = repo or AuctionRepository()
        self._clock = clock

    # ------------------------------------------------------------------
    # Seller submission
    # ------------------------------------------------------------------

    async def submit_for_approval(
        self, db: AsyncSession, seller_id: str, req: CreateAuctionRequest
    ) -> AuctionDetail:
        """Create an auction in approval_status=pending, status=active."""
        now = self._clock()
        start_time = as_utc(req.start_time) if req.start_time else now
        end_time = as_utc(req.end_time)
        if end_time <= now:
            raise ValidationError("end_time must be in the future")
        if end_time <= start_time:
            raise ValidationError("end_time must be after start_time")
        if req.category_id is not None and not await self._repo.category_exists(
            db, req.category_id
        ):
            raise ValidationError(f"Unknown category_id: {req.category_id}")

        data = NewAuction(
            title=req.title.strip(),
            description=req.description,
            image_url=req.image_url,
            category_id=req.category_id,
            starting_price=req.starting_price,
            start_time=start_time,
            end_time=end_time,
        )
        if not data.title:
            raise ValidationError("title must not be blank")
        try:
            auction = await self._repo.create(db, seller_id, data)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Auction %s submitted for approval by %s", auction.id, seller_id)
        return AuctionDetail.from_domain(auction)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_auctions(
        self,
        db: AsyncSession,
        status: str | None,
        category_id: int | None,
        search: str | None,
        cursor: str | None,
        limit: int,
    ) -> AuctionListResponse:
        # status=None → default active; status='all' → no status filter.
        # Approval filtering is not optional: the repository query hard-codes it.
        sql_status = None if status == "all" else (status or AuctionStatus.ACTIVE.value)
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        listings = await self._repo.list_public(
            db, sql_status, category_id, search or None, cursor_ts, cursor_id, limit + 1
        )
        has_more = len(listings) > limit
        page = listings[:limit]

        items = [AuctionListItem.from_domain(a) for a in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return AuctionListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_visible(
        self, db: AsyncSession, auction_id: str, viewer_id: str | None, is_admin: bool
    ) -> Auction:
        """Load an auction the viewer may see; hidden auctions look missing."""
        auction = await self._repo.get_by_id(db, auction_id)
        if auction is None or not can_view(auction, viewer_id, is_admin):
            raise AuctionNotFoundError(auction_id)
        return auction

    async def get_auction(
        self, db: AsyncSession, auction_id: str, viewer_id: str | None, is_admin: bool
    ) -> AuctionDetail:
        auction = await self.get_visible(db, auction_id, viewer_id, is_admin)
        return AuctionDetail.from_domain(auction)

    async def my_auctions(self, db: AsyncSession, user_id: str) -> MyAuctionsResponse:
        selling = await self._repo.list_by_seller(db, user_id)
        bidding = await self._repo.list_bid_on(db, user_id)
        shipped = await self._repo.shipped_auction_ids(
            db, sorted({a.id for a in selling} | {a.id for a in bidding})
        )

        def _item(a: Auction) -> MyAuctionItem:
            return MyAuctionItem(
                **AuctionDetail.from_domain(a).model_dump(), has_shipment=a.id in shipped
            )

        return MyAuctionsResponse(
            selling=[_item(a) for a in selling],
            bidding=[_item(a) for a in bidding],
        )

    async def list_categories(self, db: AsyncSession) -> list[CategoryOut]:
        return [CategoryOut.from_domain(c) for c in await self._repo.list_categories(db)]

    # ------------------------------------------------------------------
    # Lifecycle: close / cancel
    # ------------------------------------------------------------------

    async def close_auction(self, db: AsyncSession, auction_id: str) -> AuctionDetail:
        """End an expired auction: status=completed, winner_id=highest bidder (or null)."""
        now = self._clock()
        try:
            auction = await self._repo.close(db, auction_id, now)
            if auction is None:
                current = await self._repo.get_by_id(db, auction_id)
                if current is None:
                    raise AuctionNotFoundError(auction_id)
                raise AuctionNotClosableError(
                    auction_id, not_closable_reason(current, now) or "state changed concurrently"
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Auction %s closed at price %d, winner=%s",
            auction.id, auction.current_price, auction.winner_id,
        )
        return AuctionDetail.from_domain(auction)

    async def close_expired(self, db: AsyncSession, limit: int = 100) -> list[AuctionDetail]:
        """Sweep: close every active auction whose end_time has passed.

        Each auction is closed in its own transaction; one that another worker
        closed first is skipped.
        """
        ids = await self._repo.list_expired_ids(db, self._clock(), limit)
        await db.rollback()  # end the read-only transaction before per-auction commits
        closed: list[AuctionDetail] = []
        for auction_id in ids:
            try:
                closed.append(await self.close_auction(db, auction_id))
            except AuctionNotClosableError:
                logger.info("Auction %s already closed by a concurrent sweep", auction_id)
        return closed

    async def cancel_auction(
        self, db: AsyncSession, auction_id: str, seller_id: str
    ) -> AuctionDetail:
        try:
            auction = await self._repo.cancel(db, auction_id, seller_id)
            if auction is None:
                current = await self._repo.get_by_id(db, auction_id)
                if current is None:
                    raise AuctionNotFoundError(auction_id)
                if current.seller_id != seller_id:
                    raise ForbiddenError("Only the seller can cancel this auction")
                if current.status != AuctionStatus.ACTIVE:
                    raise AuctionNotCancellableError(auction_id, f"auction is {current.status}")
                if await self._repo.has_bids(db, auction_id):
                    raise AuctionNotCancellableError(auction_id, "bids have been placed")
                raise AuctionNotCancellableError(auction_id, "state changed concurrently")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Auction %s cancelled by seller %s", auction_id, seller_id)
        return AuctionDetail.from_domain(auction)
