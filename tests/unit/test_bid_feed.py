"""Unit tests for the Redis bid feed (mocked redis / pubsub)."""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.am_bidding.domain.models import Bid
from src.am_bidding.infrastructure.feed import (
    BidFeed,
    BidSubscription,
    bid_from_payload,
    bid_to_payload,
    channel_for,
)

BID = Bid(
    id=7,
    auction_id="auc-1",
    bidder_id="user-z",
    amount=1500,
    bid_time=datetime(2026, 10, 19, 12, 0, 1, tzinfo=UTC),
)


def _message(data: str) -> dict:
    return {"type": "message", "channel": channel_for("auc-1"), "data": data}


def test_channel_name() -> None:
    assert channel_for("auc-1") == "auction:auc-1:bids"


def test_payload_round_trip_keeps_every_field() -> None:
    payload = bid_to_payload(BID)
    assert payload["bid_time"] == "2026-10-19T12:00:01+00:00"
    assert bid_from_payload(json.loads(json.dumps(payload))) == BID


class TestBidFeed:
    async def test_publish_sends_json_on_auction_channel(self) -> None:
        redis = MagicMock()
        redis.publish = AsyncMock(return_value=2)
        feed = BidFeed(redis_factory=AsyncMock(return_value=redis))

        receivers = await feed.publish(BID)

        assert receivers == 2
        channel, body = redis.publish.call_args.args
        assert channel == "auction:auc-1:bids"
        assert json.loads(body)["amount"] == 1500

    async def test_subscribe_returns_handle_on_channel(self) -> None:
        pubsub = MagicMock()
        pubsub.subscribe = AsyncMock()
        redis = MagicMock()
        redis.pubsub.return_value = pubsub
        feed = BidFeed(redis_factory=AsyncMock(return_value=redis))

        sub = await feed.subscribe("auc-1")

        assert isinstance(sub, BidSubscription)
        pubsub.subscribe.assert_awaited_once_with("auction:auc-1:bids")


class TestBidSubscription:
    @pytest.fixture
    def pubsub(self) -> MagicMock:
        pubsub = MagicMock()
        pubsub.unsubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()
        return pubsub

    async def test_yields_bids_and_skips_idle_and_malformed(self, pubsub: MagicMock) -> None:
        second = Bid(id=8, auction_id="auc-1", bidder_id="user-x", amount=1600,
                     bid_time=BID.bid_time)
        pubsub.get_message = AsyncMock(side_effect=[
            None,
            _message(json.dumps(bid_to_payload(BID))),
            _message("not json"),
            _message(json.dumps({"id": 1})),
            _message(json.dumps(bid_to_payload(second))),
        ])
        sub = BidSubscription(pubsub, "auc-1")

        assert await sub.__anext__() == BID
        assert await sub.__anext__() == second

    async def test_close_unsubscribes_and_stops_iteration(self, pubsub: MagicMock) -> None:
        pubsub.get_message = AsyncMock(return_value=None)
        async with BidSubscription(pubsub, "auc-1") as sub:
            pass

        assert sub.closed
        pubsub.unsubscribe.assert_awaited_once_with("auction:auc-1:bids")
        pubsub.aclose.assert_awaited_once()
        with pytest.raises(StopAsyncIteration):
            await sub.__anext__()

    async def test_close_is_idempotent(self, pubsub: MagicMock) -> None:
        sub = BidSubscription(pubsub, "auc-1")
        await sub.close()
        await sub.close()
        pubsub.aclose.assert_awaited_once()
