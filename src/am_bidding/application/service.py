"""BiddingService — place_bid and bid history.

place_bid never reads-then-writes the price from Python: acceptance is the
repository's conditional UPDATE. When it matches zero rows the auction is
re-read only to pick the right error for the caller.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.lifecycle import not_biddable_reason
from src.am_auction.domain.repository import AuctionRepositoryProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository
from src.am_bidding.application.schemas import BidHistoryItem, BidHistoryResponse, BidOut
from src.am_bidding.domain.models import Bid
from src.am_bidding.infrastructure.feed import BidFeed
from src.am_bidding.infrastructure.persistence import BidRepository
from src.am_common.datetime_utils import utc_now
from src.am_common.errors import (
    AuctionNotBiddableError,
    AuctionNotFoundError,
    BidTooLowError,
    ForbiddenError,
    ValidationError,
)
from src.am_common.money import validate_amount

logger = logging.getLogger("am.bidding")


class BiddingService:
    def __init__(
        self,
        bids: BidRepository | None = None,
        auctions: AuctionRepositoryProtocol | None = None,
        feed: BidFeed | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._bids = bids or BidRepository()
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._feed = feed or BidFeed()
        self._clock = clock

    async def place_bid(
        self, db: AsyncSession, auction_id: str, bidder_id: str, amount: int
    ) -> BidOut:
        try:
            validate_amount(amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from None

        now = self._clock()
        try:
            if not await self._bids.accept(db, auction_id, bidder_id, amount, now):
                await self._raise_rejection(db, auction_id, bidder_id, amount, now)
            bid = await self._bids.record(db, auction_id, bidder_id, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Bid %d accepted: auction=%s amount=%d", bid.id, auction_id, amount)
        await self._broadcast(bid)
        return BidOut.from_domain(bid)

    async def _raise_rejection(
        self, db: AsyncSession, auction_id: str, bidder_id: str, amount: int, now: datetime
    ) -> None:
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        reason = not_biddable_reason(auction, now)
        if reason is not None:
            # Hide the existence of unapproved auctions from bidders
            if auction.approval_status != "approved" and auction.seller_id != bidder_id:
                raise AuctionNotFoundError(auction_id)
            raise AuctionNotBiddableError(auction_id, reason)
        if auction.seller_id == bidder_id:
            raise ForbiddenError("Sellers cannot bid on their own auction")
        logger.info(
            "Bid rejected as too low: auction=%s amount=%d current=%d",
            auction_id, amount, auction.current_price,
        )
        raise BidTooLowError(amount, auction.current_price)

    async def _broadcast(self, bid: Bid) -> None:
        # The bid is committed; a fan-out failure only delays other viewers,
        # who still converge on the next event or a page reload.
        try:
            await self._feed.publish(bid)
        except RedisError:
            logger.exception("Failed to publish bid %d for auction %s", bid.id, bid.auction_id)

    async def bid_history(
        self, db: AsyncSession, auction_id: str, limit: int
    ) -> BidHistoryResponse:
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None or auction.approval_status != "approved":
            raise AuctionNotFoundError(auction_id)
        entries = await self._bids.list_history(db, auction_id, limit)
        return BidHistoryResponse(
            auction_id=auction_id,
            current_price=auction.current_price,
            bids=[BidHistoryItem.from_domain(e) for e in entries],
        )
