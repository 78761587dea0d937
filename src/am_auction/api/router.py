"""am_auction REST endpoints.

GET  /categories                  — category tags
GET  /auctions                    — approved listings, cursor pagination (public)
POST /auctions                    — seller submits an auction for approval
GET  /auctions/mine               — caller's selling + bidding auctions
GET  /auctions/{auction_id}       — detail (pending/rejected: seller/admin only)
POST /auctions/{auction_id}/cancel — seller cancels an auction with no bids
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.application.schemas import CreateAuctionRequest
from src.am_auction.application.service import AuctionApplicationService
from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import get_current_user, get_optional_user
from src.am_gateway.user.db_models import UserModel

router = APIRouter(tags=["auctions"])

_service = AuctionApplicationService()


@router.get("/categories")
async def list_categories(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_categories(db)
    return wrap(request, [c.model_dump() for c in result])


@router.get("/auctions")
async def list_auctions(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status_filter: str | None = Query(
        None,
        alias="status",
        pattern="^(active|completed|cancelled|all)$",
        description="Default: active. Use 'all' for every status.",
    ),
    category_id: int | None = Query(None),
    q: str | None = Query(None, max_length=200, description="Title search"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_auctions(db, status_filter, category_id, q, cursor, limit)
    return wrap(request, result.model_dump())


@router.post("/auctions", status_code=status.HTTP_201_CREATED)
async def submit_auction(
    request: Request,
    body: CreateAuctionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.submit_for_approval(db, str(current_user.id), body)
    return wrap(request, result.model_dump(), message="Auction submitted for approval")


@router.get("/auctions/mine")
async def my_auctions(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.my_auctions(db, str(current_user.id))
    return wrap(request, result.model_dump())


@router.get("/auctions/{auction_id}")
async def get_auction(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    viewer_id = str(current_user.id) if current_user else None
    is_admin = bool(current_user and current_user.is_admin)
    result = await _service.get_auction(db, str(auction_id), viewer_id, is_admin)
    return wrap(request, result.model_dump())


@router.post("/auctions/{auction_id}/cancel")
async def cancel_auction(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.cancel_auction(db, str(auction_id), str(current_user.id))
    return wrap(request, result.model_dump(), message="Auction cancelled")
