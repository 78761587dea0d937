"""009: create auction_listings view

Revision ID: 009
Revises: 008
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE VIEW auction_listings AS
        SELECT a.id, a.title, a.image_url, a.category_id, c.name AS category_name,
               a.seller_id, p.full_name AS seller_name,
               a.starting_price, a.current_price, a.start_time, a.end_time,
               a.status, a.approval_status, a.created_at,
               (SELECT COUNT(*) FROM bids b WHERE b.auction_id = a.id) AS bid_count
        FROM auctions a
        LEFT JOIN categories c ON c.id = a.category_id
        LEFT JOIN profiles p ON p.user_id = a.seller_id;
    """)


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS auction_listings;")
