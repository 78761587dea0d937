"""Unit tests for BiddingService (in-memory store standing in for PostgreSQL)."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.am_auction.domain.models import Auction
from src.am_bidding.application.service import BiddingService
from src.am_bidding.domain.models import Bid, BidHistoryEntry
from src.am_common.errors import (
    AuctionNotBiddableError,
    AuctionNotFoundError,
    BidTooLowError,
    ForbiddenError,
    ValidationError,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _make_auction(**kwargs) -> Auction:
    defaults = dict(
        id="auc-1", title="Vintage clock", description=None, image_url=None,
        category_id=None, seller_id="seller", starting_price=1000, current_price=1000,
        start_time=NOW - timedelta(hours=1), end_time=NOW + timedelta(hours=1),
        status="active", approval_status="approved", payment_status="unpaid",
        winner_id=None, approved_at=None, approved_by=None, rejection_reason=None,
        created_at=NOW - timedelta(days=1), updated_at=NOW - timedelta(days=1),
    )
    defaults.update(kwargs)
    return Auction(**defaults)


class _Store:
    """Mimics the conditional UPDATE + INSERT of BidRepository over one auction."""

    def __init__(self, auction: Auction | None) -> None:
        self.auction = auction
        self.bids: list[Bid] = []

    async def accept(self, db, auction_id, bidder_id, amount, now) -> bool:
        a = self.auction
        if a is None or a.id != auction_id:
            return False
        ok = (
            a.approval_status == "approved"
            and a.status == "active"
            and a.start_time <= now < a.end_time
            and a.seller_id != bidder_id
            and a.current_price < amount
        )
        if ok:
            a.current_price = amount
        return ok

    async def record(self, db, auction_id, bidder_id, amount) -> Bid:
        bid = Bid(
            id=len(self.bids) + 1,
            auction_id=auction_id,
            bidder_id=bidder_id,
            amount=amount,
            bid_time=NOW + timedelta(seconds=len(self.bids)),
        )
        self.bids.append(bid)
        return bid

    async def get_by_id(self, db, auction_id):
        return self.auction if self.auction and self.auction.id == auction_id else None


@pytest.fixture
def db() -> MagicMock:
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def feed() -> MagicMock:
    feed = MagicMock()
    feed.publish = AsyncMock(return_value=1)
    return feed


def _service(store: _Store, feed: MagicMock) -> BiddingService:
    return BiddingService(bids=store, auctions=store, feed=feed, clock=lambda: NOW)


class TestPlaceBid:
    async def test_scenario_increasing_bids_with_one_too_low(self, db, feed) -> None:
        store = _Store(_make_auction(current_price=1000))
        svc = _service(store, feed)

        first = await svc.place_bid(db, "auc-1", "user-x", 1200)
        with pytest.raises(BidTooLowError) as exc_info:
            await svc.place_bid(db, "auc-1", "user-y", 1100)
        third = await svc.place_bid(db, "auc-1", "user-z", 1500)

        assert first.amount == 1200
        assert third.amount == 1500
        assert exc_info.value.current_price == 1200
        assert store.auction.current_price == 1500
        assert [b.amount for b in store.bids] == [1200, 1500]
        assert feed.publish.await_count == 2
        assert db.commit.await_count == 2
        db.rollback.assert_awaited_once()

    async def test_equal_amount_is_too_low(self, db, feed) -> None:
        store = _Store(_make_auction(current_price=1000))
        with pytest.raises(BidTooLowError):
            await _service(store, feed).place_bid(db, "auc-1", "user-x", 1000)
        assert store.bids == []
        feed.publish.assert_not_awaited()

    async def test_race_loser_is_rejected_not_overwritten(self, db, feed) -> None:
        # The competing 1500 committed between our request and our UPDATE
        store = _Store(_make_auction(current_price=1500))
        with pytest.raises(BidTooLowError):
            await _service(store, feed).place_bid(db, "auc-1", "user-y", 1400)
        assert store.auction.current_price == 1500

    @pytest.mark.parametrize("amount", [0, -10])
    async def test_non_positive_amount(self, db, feed, amount: int) -> None:
        store = _Store(_make_auction())
        with pytest.raises(ValidationError):
            await _service(store, feed).place_bid(db, "auc-1", "user-x", amount)

    async def test_missing_auction(self, db, feed) -> None:
        with pytest.raises(AuctionNotFoundError):
            await _service(_Store(None), feed).place_bid(db, "auc-1", "user-x", 1200)

    async def test_pending_auction_looks_missing_to_bidders(self, db, feed) -> None:
        store = _Store(_make_auction(approval_status="pending"))
        with pytest.raises(AuctionNotFoundError):
            await _service(store, feed).place_bid(db, "auc-1", "user-x", 1200)

    async def test_ended_auction_not_biddable(self, db, feed) -> None:
        store = _Store(_make_auction(end_time=NOW))
        with pytest.raises(AuctionNotBiddableError):
            await _service(store, feed).place_bid(db, "auc-1", "user-x", 1200)

    async def test_cancelled_auction_not_biddable(self, db, feed) -> None:
        store = _Store(_make_auction(status="cancelled"))
        with pytest.raises(AuctionNotBiddableError):
            await _service(store, feed).place_bid(db, "auc-1", "user-x", 1200)

    async def test_seller_cannot_bid(self, db, feed) -> None:
        store = _Store(_make_auction())
        with pytest.raises(ForbiddenError):
            await _service(store, feed).place_bid(db, "auc-1", "seller", 1200)

    async def test_publish_failure_does_not_undo_bid(self, db, feed) -> None:
        feed.publish = AsyncMock(side_effect=RedisConnectionError("down"))
        store = _Store(_make_auction())

        result = await _service(store, feed).place_bid(db, "auc-1", "user-x", 1200)

        assert result.amount == 1200
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()


class TestBidHistory:
    async def test_returns_entries_for_approved_auction(self, db, feed) -> None:
        repo = MagicMock()
        repo.list_history = AsyncMock(return_value=[
            BidHistoryEntry(id=2, bidder_id="z", bidder_name="Zed", amount=1500, bid_time=NOW),
            BidHistoryEntry(id=1, bidder_id="x", bidder_name=None, amount=1200, bid_time=NOW),
        ])
        auctions = MagicMock()
        auctions.get_by_id = AsyncMock(return_value=_make_auction(current_price=1500))
        svc = BiddingService(bids=repo, auctions=auctions, feed=feed)

        resp = await svc.bid_history(db, "auc-1", 50)

        assert resp.current_price == 1500
        assert [b.amount for b in resp.bids] == [1500, 1200]
        repo.list_history.assert_awaited_once_with(db, "auc-1", 50)

    async def test_rejected_auction_hidden(self, db, feed) -> None:
        auctions = MagicMock()
        auctions.get_by_id = AsyncMock(return_value=_make_auction(approval_status="rejected"))
        svc = BiddingService(bids=MagicMock(), auctions=auctions, feed=feed)
        with pytest.raises(AuctionNotFoundError):
            await svc.bid_history(db, "auc-1", 50)
