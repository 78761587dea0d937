"""006: create payments table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payments (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id          UUID            NOT NULL REFERENCES auctions (id),
            winner_id           UUID            NOT NULL REFERENCES users (id),
            amount              BIGINT          NOT NULL,
            amount_minor        BIGINT          NOT NULL,
            currency            VARCHAR(3)      NOT NULL DEFAULT 'INR',
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            provider_order_id   VARCHAR(64)     NOT NULL,
            provider_payment_id VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            paid_at             TIMESTAMPTZ,
            CONSTRAINT uq_payments_auction          UNIQUE (auction_id),
            CONSTRAINT uq_payments_provider_order   UNIQUE (provider_order_id),
            CONSTRAINT ck_payments_status           CHECK (status IN ('pending', 'paid')),
            CONSTRAINT ck_payments_amount_minor     CHECK (amount_minor >= 1)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payments CASCADE;")
