"""004: create bids table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Append-only. bid_time is assigned by the database (clock_timestamp()).
    op.execute("""
        CREATE TABLE bids (
            id              BIGSERIAL       PRIMARY KEY,
            auction_id      UUID            NOT NULL REFERENCES auctions (id) ON DELETE CASCADE,
            bidder_id       UUID            NOT NULL REFERENCES users (id),
            amount          BIGINT          NOT NULL,
            bid_time        TIMESTAMPTZ     NOT NULL DEFAULT clock_timestamp(),
            CONSTRAINT ck_bids_amount_positive  CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_bids_auction_time ON bids (auction_id, bid_time DESC, id DESC);")
    op.execute("CREATE INDEX idx_bids_auction_amount ON bids (auction_id, amount DESC);")
    op.execute("CREATE INDEX idx_bids_bidder ON bids (bidder_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
