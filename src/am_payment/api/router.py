"""am_payment endpoints.

POST /payments/orders          — winner creates a provider order
GET  /payments/{auction_id}    — payment status (seller or winner)
POST /payments/webhook         — provider callback; bare {"status": "ok"}
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import UserModel
from src.am_payment.application.schemas import CreateOrderRequest
from src.am_payment.application.service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])

_service = PaymentService()


@router.post("/orders")
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_payment_order(db, str(body.auction_id), str(current_user.id))
    return wrap(request, result.model_dump(), message="Payment order created")


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    x_signature: Annotated[str | None, Header()] = None,
    x_razorpay_signature: Annotated[str | None, Header()] = None,
) -> dict[str, str]:
    raw_body = await request.body()
    await _service.handle_webhook(db, raw_body, x_signature or x_razorpay_signature)
    return {"status": "ok"}


@router.get("/{auction_id}")
async def get_payment(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_payment(db, str(auction_id), str(current_user.id))
    return wrap(request, result.model_dump())
