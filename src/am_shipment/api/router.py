"""am_shipment endpoints.

PUT /auctions/{auction_id}/shipment — seller creates or updates the shipment
GET /auctions/{auction_id}/shipment — seller or winner reads it
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import UserModel
from src.am_shipment.application.schemas import UpsertShipmentRequest
from src.am_shipment.application.service import ShipmentService

router = APIRouter(tags=["shipments"])

_service = ShipmentService()


@router.put("/auctions/{auction_id}/shipment")
async def upsert_shipment(
    auction_id: uuid.UUID,
    body: UpsertShipmentRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.upsert_shipment(db, str(auction_id), str(current_user.id), body)
    return wrap(request, result.model_dump(), message="Shipment saved")


@router.get("/auctions/{auction_id}/shipment")
async def get_shipment(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_shipment(db, str(auction_id), str(current_user.id))
    return wrap(request, result.model_dump())
