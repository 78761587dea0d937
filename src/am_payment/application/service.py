"""PaymentService — order creation for the winner, webhook settlement, status reads.

Settlement flow:
    winner ── create_payment_order ──▶ provider order + payments(pending)
    provider ── payment.captured webhook ──▶ payments(paid) + auctions.payment_status=paid

The provider is called before any write so an upstream failure leaves the
database untouched. A still-pending order at the same amount is handed back
instead of issuing another; every issued order is kept in payment_orders, so a
capture for any of them settles the auction.
"""

import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_auction.domain.models import Auction
from src.am_auction.domain.repository import AuctionRepositoryProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository
from src.am_common.enums import AuctionPaymentStatus, PaymentStatus
from src.am_common.errors import (
    AuctionNotFoundError,
    ForbiddenError,
    InvalidSignatureError,
    NotFoundError,
    PaymentAlreadyCompletedError,
)
from src.am_common.money import to_minor_units
from src.am_payment.application.schemas import CreateOrderResponse, PaymentOut
from src.am_payment.domain.signature import verify_signature
from src.am_payment.domain.webhook import parse_captured
from src.am_payment.infrastructure.gateway_client import PaymentGatewayClient
from src.am_payment.infrastructure.persistence import PaymentRepository

logger = logging.getLogger("am.payment")


class PaymentService:
    def __init__(
        self,
        repo: PaymentRepository | None = None,
        auctions: AuctionRepositoryProtocol | None = None,
        gateway: PaymentGatewayClient | None = None,
        webhook_secret: str | None = None,
        currency: str | None = None,
    ) -> None:
        self._repo = repo or PaymentRepository()
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._gateway = gateway or PaymentGatewayClient()
        self._webhook_secret = (
            webhook_secret if webhook_secret is not None else settings.PAYMENT_WEBHOOK_SECRET
        )
        self._currency = currency or settings.PAYMENT_CURRENCY

    async def _load_auction(self, db: AsyncSession, auction_id: str) -> Auction:
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        return auction

    # ------------------------------------------------------------------
    # Order creation
    # ------------------------------------------------------------------

    async def create_payment_order(
        self, db: AsyncSession, auction_id: str, requester_id: str
    ) -> CreateOrderResponse:
        auction = await self._load_auction(db, auction_id)
        # winner_id is only ever set by close, so this also covers "not completed"
        if auction.winner_id is None or auction.winner_id != requester_id:
            raise ForbiddenError("Only the winning bidder can pay for this auction")
        if auction.payment_status == AuctionPaymentStatus.PAID:
            raise PaymentAlreadyCompletedError(auction_id)

        amount_minor = to_minor_units(auction.current_price)
        existing = await self._repo.get_by_auction(db, auction_id)
        if (
            existing is not None
            and existing.status == PaymentStatus.PENDING
            and existing.amount_minor == amount_minor
            and existing.currency == self._currency
        ):
            # Reopened checkout: hand back the open order instead of issuing a second one
            logger.info(
                "Reusing pending payment order %s for auction %s",
                existing.provider_order_id, auction_id,
            )
            return CreateOrderResponse(
                order_id=existing.provider_order_id,
                key_id=self._gateway.key_id,
                amount=existing.amount_minor,
                currency=existing.currency,
            )

        order = await self._gateway.create_order(
            amount_minor,
            self._currency,
            receipt=f"auction_{auction.id}",
            notes={"title": auction.title},
        )

        try:
            await self._repo.record_order(
                db, auction_id, order.order_id, order.amount_minor, order.currency
            )
            payment = await self._repo.upsert_pending(
                db,
                auction_id,
                auction.winner_id,
                auction.current_price,
                order.amount_minor,
                order.currency,
                order.order_id,
            )
            if payment is None:
                # A capture landed between the read above and this write
                raise PaymentAlreadyCompletedError(auction_id)
            await self._repo.mark_auction_pending(db, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Payment order %s created: auction=%s amount_minor=%d %s",
            order.order_id, auction_id, order.amount_minor, order.currency,
        )
        return CreateOrderResponse(
            order_id=order.order_id,
            key_id=self._gateway.key_id,
            amount=order.amount_minor,
            currency=order.currency,
        )

    # ------------------------------------------------------------------
    # Webhook
    # ------------------------------------------------------------------

    async def handle_webhook(
        self, db: AsyncSession, raw_body: bytes, signature: str | None
    ) -> bool:
        """Verify and apply a provider webhook. True when this delivery settled a payment.

        Raises InvalidSignatureError on a missing or wrong signature. Anything
        else that cannot be applied (unknown event, unknown order, bad JSON,
        redelivery) is logged and acknowledged.
        """
        if not verify_signature(raw_body, signature, self._webhook_secret):
            logger.warning("Rejected payment webhook: invalid signature")
            raise InvalidSignatureError()

        try:
            payload = json.loads(raw_body)
        except ValueError:
            logger.warning("Payment webhook with valid signature but malformed JSON ignored")
            return False

        captured = parse_captured(payload)
        if captured is None:
            event = payload.get("event") if isinstance(payload, dict) else None
            logger.info("Payment webhook event %r acknowledged without action", event)
            return False

        try:
            auction_id = await self._repo.mark_paid(db, captured.order_id, captured.payment_id)
            if auction_id is None:
                await db.rollback()
                logger.info(
                    "Payment webhook for order %s: unknown order or already paid",
                    captured.order_id,
                )
                return False
            await self._repo.mark_auction_paid(db, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Payment captured: order=%s auction=%s", captured.order_id, auction_id)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_payment(
        self, db: AsyncSession, auction_id: str, requester_id: str
    ) -> PaymentOut:
        auction = await self._load_auction(db, auction_id)
        if requester_id not in (auction.winner_id, auction.seller_id):
            raise ForbiddenError("Only the seller or the winning bidder can view this payment")
        payment = await self._repo.get_by_auction(db, auction_id)
        if payment is None:
            raise NotFoundError("Payment", auction_id)
        return PaymentOut.from_domain(payment)
