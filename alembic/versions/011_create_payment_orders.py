"""011: create payment_orders table (every provider order ever issued per auction)

Revision ID: 011
Revises: 010
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "011"
down_revision: Union[str, None] = "010"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_orders (
            provider_order_id   VARCHAR(64)     PRIMARY KEY,
            auction_id          UUID            NOT NULL REFERENCES auctions (id),
            amount_minor        BIGINT          NOT NULL,
            currency            VARCHAR(3)      NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_payment_orders_auction ON payment_orders (auction_id);")
    # Backfill the orders already referenced by payments
    op.execute("""
        INSERT INTO payment_orders
            (provider_order_id, auction_id, amount_minor, currency, created_at)
        SELECT provider_order_id, auction_id, amount_minor, currency, created_at
        FROM payments
        ON CONFLICT DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_orders CASCADE;")
