"""am_bidding endpoints.

POST /auctions/{auction_id}/bids      — place a bid (authenticated)
GET  /auctions/{auction_id}/bids      — bid history, newest first (public)
WS   /ws/auctions/{auction_id}/bids   — live bid rows as JSON text frames
"""

import asyncio
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.lifecycle import is_publicly_visible
from src.am_auction.infrastructure.persistence import AuctionRepository
from src.am_bidding.application.schemas import PlaceBidRequest
from src.am_bidding.application.service import BiddingService
from src.am_bidding.domain.price_view import PriceView
from src.am_bidding.infrastructure.feed import BidFeed, BidSubscription, bid_to_payload
from src.am_common.database import async_session_factory, get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import UserModel

logger = logging.getLogger("am.bidding.ws")

router = APIRouter(tags=["bids"])

_service = BiddingService()
_feed = BidFeed()
_auctions = AuctionRepository()


@router.post("/auctions/{auction_id}/bids", status_code=status.HTTP_201_CREATED)
async def place_bid(
    auction_id: uuid.UUID,
    body: PlaceBidRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_bid(db, str(auction_id), str(current_user.id), body.amount)
    return wrap(request, result.model_dump(), message="Bid placed")


@router.get("/auctions/{auction_id}/bids")
async def bid_history(
    auction_id: uuid.UUID,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await _service.bid_history(db, str(auction_id), limit)
    return wrap(request, result.model_dump())


async def _forward(
    websocket: WebSocket, subscription: BidSubscription, view: PriceView
) -> None:
    # Every accepted bid row is sent; current_price is the running max so far.
    async for bid in subscription:
        view.apply(bid)
        await websocket.send_json({**bid_to_payload(bid), "current_price": view.current_price})


async def _drain(websocket: WebSocket) -> None:
    # Clients only listen; reading is how a disconnect is noticed.
    while True:
        await websocket.receive_text()


@router.websocket("/ws/auctions/{auction_id}/bids")
async def bid_stream(websocket: WebSocket, auction_id: uuid.UUID) -> None:
    # Subscribe before reading the price so no committed bid falls between the two
    async with await _feed.subscribe(str(auction_id)) as subscription:
        async with async_session_factory() as db:
            auction = await _auctions.get_by_id(db, str(auction_id))
        if auction is None or not is_publicly_visible(auction):
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await websocket.accept()
        view = PriceView(str(auction_id), auction.current_price)
        forward = asyncio.create_task(_forward(websocket, subscription, view))
        drain = asyncio.create_task(_drain(websocket))
        done, pending = await asyncio.wait({forward, drain}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Bid stream for auction %s ended with %r", auction_id, exc)
    logger.debug("Bid stream closed for auction %s", auction_id)
