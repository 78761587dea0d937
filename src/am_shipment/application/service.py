"""ShipmentService — seller-owned shipment record, gated on confirmed payment."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.lifecycle import is_ready_to_ship
from src.am_auction.domain.repository import AuctionRepositoryProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository
from src.am_common.errors import (
    AuctionNotFoundError,
    ForbiddenError,
    NotFoundError,
    PaymentNotConfirmedError,
    ValidationError,
)
from src.am_shipment.application.schemas import ShipmentOut, UpsertShipmentRequest
from src.am_shipment.domain.models import DEFAULT_SHIPMENT_STATUS
from src.am_shipment.infrastructure.persistence import ShipmentRepository

logger = logging.getLogger("am.shipment")


class ShipmentService:
    def __init__(
        self,
        repo: ShipmentRepository | None = None,
        auctions: AuctionRepositoryProtocol | None = None,
    ) -> None:
        self._repo = repo or ShipmentRepository()
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()

    async def upsert_shipment(
        self, db: AsyncSession, auction_id: str, seller_id: str, req: UpsertShipmentRequest
    ) -> ShipmentOut:
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        if auction.seller_id != seller_id:
            raise ForbiddenError("Only the seller can manage this shipment")
        if not is_ready_to_ship(auction) or auction.winner_id is None:
            raise PaymentNotConfirmedError(auction_id)

        tracking_number = req.tracking_number.strip()
        carrier = req.carrier.strip()
        if not tracking_number:
            raise ValidationError("tracking_number must not be empty")
        if not carrier:
            raise ValidationError("carrier must not be empty")
        status = req.status.strip() or DEFAULT_SHIPMENT_STATUS

        try:
            address = (req.shipping_address or "").strip() or None
            if address is None:
                address = await self._repo.profile_address(db, auction.winner_id)
            shipment = await self._repo.upsert(
                db,
                auction_id,
                seller_id,
                auction.winner_id,
                address,
                carrier,
                tracking_number,
                status,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Shipment saved: auction=%s carrier=%s tracking=%s",
            auction_id, carrier, tracking_number,
        )
        return ShipmentOut.from_domain(shipment)

    async def get_shipment(self, db: AsyncSession, auction_id: str, user_id: str) -> ShipmentOut:
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        if user_id not in (auction.seller_id, auction.winner_id):
            raise ForbiddenError("Only the seller or the winning bidder can view this shipment")
        shipment = await self._repo.get_by_auction(db, auction_id)
        if shipment is None:
            raise NotFoundError("Shipment", auction_id)
        return ShipmentOut.from_domain(shipment)
