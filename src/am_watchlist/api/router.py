"""am_watchlist endpoints (all authenticated).

GET    /watchlist                — caller's watched auctions, newest first
POST   /watchlist                — watch an auction (idempotent)
GET    /watchlist/{auction_id}   — is the caller watching it?
DELETE /watchlist/{auction_id}   — stop watching (idempotent)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import UserModel
from src.am_watchlist.application.schemas import AddToWatchlistRequest
from src.am_watchlist.application.service import WatchlistService

router = APIRouter(prefix="/watchlist", tags=["watchlist"])

_service = WatchlistService()


@router.get("")
async def list_watchlist(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_watchlist(db, str(current_user.id))
    return wrap(request, result.model_dump())


@router.post("")
async def add_to_watchlist(
    body: AddToWatchlistRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.add(db, str(current_user.id), str(body.auction_id))
    return wrap(request, result.model_dump())


@router.get("/{auction_id}")
async def watch_status(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.is_watching(db, str(current_user.id), str(auction_id))
    return wrap(request, result.model_dump())


@router.delete("/{auction_id}")
async def remove_from_watchlist(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.remove(db, str(current_user.id), str(auction_id))
    return wrap(request, result.model_dump())
