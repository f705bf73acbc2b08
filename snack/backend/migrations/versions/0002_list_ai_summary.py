"""list ai summary

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("lists", sa.Column("ai_summary", sa.Text(), nullable=True))
    op.add_column("lists", sa.Column("ai_themes", sa.JSON(), nullable=True))
    op.add_column("lists", sa.Column("ai_generated_at", sa.DateTime(), nullable=True))


def downgrade() -> None:
    op.drop_column("lists", "ai_generated_at")
    op.drop_column("lists", "ai_themes")
    op.drop_column("lists", "ai_summary")
