"""Realtime bid fan-out over Redis pub/sub.

One channel per auction: ``auction:{auction_id}:bids``. Each message is the
full accepted bid row as JSON. Delivery is fire-and-forget with no ordering
or acknowledgement guarantees; consumers fold events with max (PriceView).

Publishing happens only after the bid transaction committed, so subscribers
never see a bid that was rolled back.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

import redis.asyncio as aioredis
from redis.asyncio.client import PubSub

from src.am_bidding.domain.models import Bid
from src.am_common.redis_client import get_redis

logger = logging.getLogger("am.bidding.feed")

# Seconds get_message() waits before re-checking whether the handle was closed
_POLL_TIMEOUT = 1.0


def channel_for(auction_id: str) -> str:
    return f"auction:{auction_id}:bids"


def bid_to_payload(bid: Bid) -> dict[str, Any]:
    return {
        "id": bid.id,
        "auction_id": bid.auction_id,
        "bidder_id": bid.bidder_id,
        "amount": bid.amount,
        "bid_time": bid.bid_time.isoformat(),
    }


def bid_from_payload(data: dict[str, Any]) -> Bid:
    return Bid(
        id=int(data["id"]),
        auction_id=str(data["auction_id"]),
        bidder_id=str(data["bidder_id"]),
        amount=int(data["amount"]),
        bid_time=datetime.fromisoformat(data["bid_time"]),
    )


class BidSubscription:
    """Cancellable handle over one auction's bid channel.

    Async-iterates Bid events until close() is called:

        async with await feed.subscribe(auction_id) as sub:
            async for bid in sub:
                view.apply(bid)
    """

    def __init__(self, pubsub: PubSub, auction_id: str) -> None:
        self._pubsub = pubsub
        self.auction_id = auction_id
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "BidSubscription":
        return self

    async def __anext__(self) -> Bid:
        while not self._closed:
            message = await self._pubsub.get_message(
                ignore_subscribe_messages=True, timeout=_POLL_TIMEOUT
            )
            if message is None or message.get("type") != "message":
                continue
            try:
                return bid_from_payload(json.loads(message["data"]))
            except (ValueError, KeyError, TypeError):
                logger.warning(
                    "Dropping malformed bid event on %s: %r",
                    channel_for(self.auction_id), message.get("data"),
                )
        raise StopAsyncIteration

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._pubsub.unsubscribe(channel_for(self.auction_id))
        await self._pubsub.aclose()

    async def __aenter__(self) -> "BidSubscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class BidFeed:
    def __init__(
        self, redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis
    ) -> None:
        self._redis_factory = redis_factory

    async def publish(self, bid: Bid) -> int:
        """Publish a committed bid. Returns the number of subscribers reached."""
        redis = await self._redis_factory()
        receivers: int = await redis.publish(
            channel_for(bid.auction_id), json.dumps(bid_to_payload(bid))
        )
        return receivers

    async def subscribe(self, auction_id: str) -> BidSubscription:
        redis = await self._redis_factory()
        pubsub = redis.pubsub()
        await pubsub.subscribe(channel_for(auction_id))
        return BidSubscription(pubsub, auction_id)
