"""010: seed categories

Revision ID: 010
Revises: 009
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "010"
down_revision: Union[str, None] = "009"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO categories (name) VALUES
            ('Antiques'), ('Art'), ('Books'), ('Collectibles'), ('Electronics'),
            ('Fashion'), ('Home & Garden'), ('Jewellery'), ('Sports'), ('Vehicles')
        ON CONFLICT (name) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DELETE FROM categories;")
