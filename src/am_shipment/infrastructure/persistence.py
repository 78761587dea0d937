"""ShipmentRepository — one shipment row per auction, upserted by the seller."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_shipment.domain.models import Shipment, format_address

_SHIPMENT_COLUMNS = """
    id, auction_id, seller_id, winner_id, shipping_address, carrier,
    tracking_number, status, created_at, updated_at
"""

_GET_BY_AUCTION_SQL = text(f"""
    SELECT {_SHIPMENT_COLUMNS}
    FROM shipments
    WHERE auction_id = CAST(:auction_id AS UUID)
""")

_UPSERT_SQL = text(f"""
    INSERT INTO shipments
        (auction_id, seller_id, winner_id, shipping_address, carrier, tracking_number, status)
    VALUES
        (CAST(:auction_id AS UUID), CAST(:seller_id AS UUID), CAST(:winner_id AS UUID),
         :shipping_address, :carrier, :tracking_number, :status)
    ON CONFLICT (auction_id) DO UPDATE
    SET shipping_address = EXCLUDED.shipping_address,
        carrier = EXCLUDED.carrier,
        tracking_number = EXCLUDED.tracking_number,
        status = EXCLUDED.status,
        updated_at = NOW()
    RETURNING {_SHIPMENT_COLUMNS}
""")

_PROFILE_ADDRESS_SQL = text("""
    SELECT address, city, state, pincode
    FROM profiles
    WHERE user_id = CAST(:user_id AS UUID)
""")


def _row_to_shipment(row: object) -> Shipment:
    return Shipment(
        id=str(row.id),  # type: ignore[attr-defined]
        auction_id=str(row.auction_id),  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        winner_id=str(row.winner_id),  # type: ignore[attr-defined]
        shipping_address=row.shipping_address,  # type: ignore[attr-defined]
        carrier=row.carrier,  # type: ignore[attr-defined]
        tracking_number=row.tracking_number,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ShipmentRepository:
    async def get_by_auction(self, db: AsyncSession, auction_id: str) -> Shipment | None:
        result = await db.execute(_GET_BY_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_shipment(row) if row is not None else None

    async def upsert(
        self,
        db: AsyncSession,
        auction_id: str,
        seller_id: str,
        winner_id: str,
        shipping_address: str | None,
        carrier: str,
        tracking_number: str,
        status: str,
    ) -> Shipment:
        result = await db.execute(
            _UPSERT_SQL,
            {
                "auction_id": auction_id,
                "seller_id": seller_id,
                "winner_id": winner_id,
                "shipping_address": shipping_address,
                "carrier": carrier,
                "tracking_number": tracking_number,
                "status": status,
            },
        )
        return _row_to_shipment(result.one())

    async def profile_address(self, db: AsyncSession, user_id: str) -> str | None:
        result = await db.execute(_PROFILE_ADDRESS_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return format_address(row.address, row.city, row.state, row.pincode)
