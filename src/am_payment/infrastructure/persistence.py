"""PaymentRepository — payments table plus the auction payment_status column.

Every write that moves money state is conditional on "not already paid", so a
redelivered webhook or a late order request after capture changes nothing.
payments holds the latest order per auction; payment_orders keeps every order
ever issued so a capture for a superseded order still settles. The caller
commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_payment.domain.models import Payment

_PAYMENT_COLUMNS = """
    id, auction_id, winner_id, amount, amount_minor, currency, status,
    provider_order_id, provider_payment_id, created_at, paid_at
"""

_GET_BY_AUCTION_SQL = text(f"""
    SELECT {_PAYMENT_COLUMNS}
    FROM payments
    WHERE auction_id = CAST(:auction_id AS UUID)
""")

_UPSERT_PENDING_SQL = text(f"""
    INSERT INTO payments
        (auction_id, winner_id, amount, amount_minor, currency, status, provider_order_id)
    VALUES
        (CAST(:auction_id AS UUID), CAST(:winner_id AS UUID), :amount, :amount_minor,
         :currency, 'pending', :provider_order_id)
    ON CONFLICT (auction_id) DO UPDATE
    SET winner_id = EXCLUDED.winner_id,
        amount = EXCLUDED.amount,
        amount_minor = EXCLUDED.amount_minor,
        currency = EXCLUDED.currency,
        status = 'pending',
        provider_order_id = EXCLUDED.provider_order_id,
        provider_payment_id = NULL
    WHERE payments.status <> 'paid'
    RETURNING {_PAYMENT_COLUMNS}
""")

_RECORD_ORDER_SQL = text("""
    INSERT INTO payment_orders (provider_order_id, auction_id, amount_minor, currency)
    VALUES (:provider_order_id, CAST(:auction_id AS UUID), :amount_minor, :currency)
    ON CONFLICT (provider_order_id) DO NOTHING
""")

_MARK_AUCTION_PENDING_SQL = text("""
    UPDATE auctions
    SET payment_status = 'pending', updated_at = NOW()
    WHERE id = CAST(:auction_id AS UUID)
      AND payment_status <> 'paid'
""")

_MARK_PAYMENT_PAID_SQL = text("""
    UPDATE payments p
    SET status = 'paid',
        provider_order_id = o.provider_order_id,
        provider_payment_id = COALESCE(CAST(:provider_payment_id AS TEXT), p.provider_payment_id),
        paid_at = NOW()
    FROM payment_orders o
    WHERE o.provider_order_id = :provider_order_id
      AND p.auction_id = o.auction_id
      AND p.status <> 'paid'
    RETURNING p.auction_id
""")

_MARK_AUCTION_PAID_SQL = text("""
    UPDATE auctions
    SET payment_status = 'paid', updated_at = NOW()
    WHERE id = CAST(:auction_id AS UUID)
      AND payment_status <> 'paid'
    RETURNING id
""")


def _row_to_payment(row: object) -> Payment:
    return Payment(
        id=str(row.id),  # type: ignore[attr-defined]
        auction_id=str(row.auction_id),  # type: ignore[attr-defined]
        winner_id=str(row.winner_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        amount_minor=row.amount_minor,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        provider_order_id=row.provider_order_id,  # type: ignore[attr-defined]
        provider_payment_id=row.provider_payment_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        paid_at=row.paid_at,  # type: ignore[attr-defined]
    )


class PaymentRepository:
    async def get_by_auction(self, db: AsyncSession, auction_id: str) -> Payment | None:
        result = await db.execute(_GET_BY_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_payment(row) if row is not None else None

    async def upsert_pending(
        self,
        db: AsyncSession,
        auction_id: str,
        winner_id: str,
        amount: int,
        amount_minor: int,
        currency: str,
        provider_order_id: str,
    ) -> Payment | None:
        """Insert or replace the pending payment. None when the existing row is paid."""
        result = await db.execute(
            _UPSERT_PENDING_SQL,
            {
                "auction_id": auction_id,
                "winner_id": winner_id,
                "amount": amount,
                "amount_minor": amount_minor,
                "currency": currency,
                "provider_order_id": provider_order_id,
            },
        )
        row = result.fetchone()
        return _row_to_payment(row) if row is not None else None

    async def record_order(
        self,
        db: AsyncSession,
        auction_id: str,
        provider_order_id: str,
        amount_minor: int,
        currency: str,
    ) -> None:
        await db.execute(
            _RECORD_ORDER_SQL,
            {
                "auction_id": auction_id,
                "provider_order_id": provider_order_id,
                "amount_minor": amount_minor,
                "currency": currency,
            },
        )

    async def mark_auction_pending(self, db: AsyncSession, auction_id: str) -> None:
        await db.execute(_MARK_AUCTION_PENDING_SQL, {"auction_id": auction_id})

    async def mark_paid(
        self, db: AsyncSession, provider_order_id: str, provider_payment_id: str | None
    ) -> str | None:
        """Settle the auction's payment for any order issued for it.

        Returns the auction_id, None for an unknown order or an already paid auction.
        """
        result = await db.execute(
            _MARK_PAYMENT_PAID_SQL,
            {
                "provider_order_id": provider_order_id,
                "provider_payment_id": provider_payment_id,
            },
        )
        row = result.fetchone()
        return str(row.auction_id) if row is not None else None

    async def mark_auction_paid(self, db: AsyncSession, auction_id: str) -> bool:
        result = await db.execute(_MARK_AUCTION_PAID_SQL, {"auction_id": auction_id})
        return result.fetchone() is not None
