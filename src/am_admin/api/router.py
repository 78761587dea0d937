"""Admin REST API (every route requires an administrator)."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.application.schemas import RejectRequest
from src.am_admin.application.service import AdminService
from src.am_auction.application.schemas import CloseExpiredResponse
from src.am_auction.application.service import AuctionApplicationService
from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import require_admin
from src.am_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()
_auctions = AuctionApplicationService()


@router.get("/auctions/pending")
async def list_pending(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    result = await _service.list_pending(db, limit)
    return wrap(request, result.model_dump())


@router.post("/auctions/close-expired")
async def close_expired(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(100, ge=1, le=1000),
) -> ApiResponse:
    closed = await _auctions.close_expired(db, limit)
    return wrap(request, CloseExpiredResponse(closed=closed).model_dump())


@router.post("/auctions/{auction_id}/approve")
async def approve_auction(
    auction_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.approve(db, str(auction_id), str(admin.id))
    return wrap(request, result.model_dump(), message="Auction approved")


@router.post("/auctions/{auction_id}/reject")
async def reject_auction(
    auction_id: uuid.UUID,
    body: RejectRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.reject(db, str(auction_id), str(admin.id), body.reason)
    return wrap(request, result.model_dump(), message="Auction rejected")


@router.post("/auctions/{auction_id}/close")
async def close_auction(
    auction_id: uuid.UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _auctions.close_auction(db, str(auction_id))
    return wrap(request, result.model_dump(), message="Auction closed")


@router.get("/audit-log")
async def audit_log(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    auction_id: uuid.UUID | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    result = await _service.audit_log(db, str(auction_id) if auction_id else None, limit)
    return wrap(request, result.model_dump())


@router.get("/stats")
async def dashboard_stats(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.dashboard_stats(db)
    return wrap(request, result.model_dump())


@router.get("/analytics")
async def analytics(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(10, ge=1, le=100),
    months_back: int = Query(12, ge=1, le=60),
) -> ApiResponse:
    result = await _service.analytics(db, limit, months_back)
    return wrap(request, result.model_dump())
