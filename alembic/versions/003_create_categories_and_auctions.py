"""003: create categories and auctions tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE categories (
            id              SERIAL          PRIMARY KEY,
            name            VARCHAR(100)    NOT NULL,
            CONSTRAINT uq_categories_name   UNIQUE (name)
        );
    """)
    op.execute("""
        CREATE TABLE auctions (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            title               VARCHAR(200)    NOT NULL,
            description         TEXT,
            image_url           TEXT,
            category_id         INT             REFERENCES categories (id) ON DELETE SET NULL,
            seller_id           UUID            NOT NULL REFERENCES users (id),
            starting_price      BIGINT          NOT NULL,
            current_price       BIGINT          NOT NULL,
            start_time          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            end_time            TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'active',
            approval_status     VARCHAR(20)     NOT NULL DEFAULT 'pending',
            payment_status      VARCHAR(20)     NOT NULL DEFAULT 'unpaid',
            winner_id           UUID            REFERENCES users (id),
            approved_at         TIMESTAMPTZ,
            approved_by         UUID            REFERENCES users (id),
            rejection_reason    TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_auctions_title_not_blank  CHECK (LENGTH(TRIM(title)) > 0),
            CONSTRAINT ck_auctions_starting_price   CHECK (starting_price > 0),
            CONSTRAINT ck_auctions_price_floor      CHECK (current_price >= starting_price),
            CONSTRAINT ck_auctions_time_window      CHECK (end_time > start_time),
            CONSTRAINT ck_auctions_status
                CHECK (status IN ('active', 'completed', 'cancelled')),
            CONSTRAINT ck_auctions_approval_status
                CHECK (approval_status IN ('pending', 'approved', 'rejected')),
            CONSTRAINT ck_auctions_payment_status
                CHECK (payment_status IN ('unpaid', 'pending', 'paid')),
            CONSTRAINT ck_auctions_winner_completed
                CHECK (winner_id IS NULL OR status = 'completed')
        );
    """)
    op.execute(
        "CREATE INDEX idx_auctions_listing ON auctions "
        "(approval_status, status, created_at DESC, id DESC);"
    )
    op.execute("CREATE INDEX idx_auctions_seller ON auctions (seller_id, created_at DESC);")
    op.execute(
        "CREATE INDEX idx_auctions_expiry ON auctions (end_time) WHERE status = 'active';"
    )
    op.execute("""
        CREATE TRIGGER trg_auctions_updated_at
            BEFORE UPDATE ON auctions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auctions CASCADE;")
    op.execute("DROP TABLE IF EXISTS categories CASCADE;")
