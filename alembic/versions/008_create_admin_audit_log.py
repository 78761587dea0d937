"""008: create admin audit log

Revision ID: 008
Revises: 007
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE admin_audit_log (
            id              BIGSERIAL       PRIMARY KEY,
            auction_id      UUID            NOT NULL REFERENCES auctions (id) ON DELETE CASCADE,
            admin_id        UUID            NOT NULL REFERENCES users (id),
            action          VARCHAR(20)     NOT NULL,
            details         TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_audit_action CHECK (action IN ('approved', 'rejected'))
        );
    """)
    op.execute("CREATE INDEX idx_audit_auction ON admin_audit_log (auction_id, created_at DESC);")
    # Append-only: reject UPDATE/DELETE at the database level.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_audit_log_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'admin_audit_log is append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_audit_log_immutable
            BEFORE UPDATE OR DELETE ON admin_audit_log
            FOR EACH ROW EXECUTE FUNCTION fn_audit_log_immutable();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS admin_audit_log CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_audit_log_immutable();")
