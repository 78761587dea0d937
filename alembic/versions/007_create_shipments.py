"""007: create shipments table

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE shipments (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id          UUID            NOT NULL REFERENCES auctions (id),
            seller_id           UUID            NOT NULL REFERENCES users (id),
            winner_id           UUID            NOT NULL REFERENCES users (id),
            shipping_address    TEXT,
            carrier             VARCHAR(100)    NOT NULL,
            tracking_number     VARCHAR(100)    NOT NULL,
            status              VARCHAR(50)     NOT NULL DEFAULT 'Shipped',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_shipments_auction UNIQUE (auction_id)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_shipments_updated_at
            BEFORE UPDATE ON shipments
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS shipments CASCADE;")
