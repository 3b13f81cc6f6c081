"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the short_urls table.

    Both short_code and original_url carry unique constraints: the first is
    the lookup key, the second keeps one record per URL even when two
    first-time creations race under read-committed isolation.
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'short_urls' in existing_tables:
        return

    op.create_table(
        'short_urls',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('original_url', sa.Text(), nullable=False),
        sa.Column('short_code', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('visit_count', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('original_url', name='uq_short_urls_original_url'),
    )

    op.create_index(
        'ix_short_urls_short_code',
        'short_urls',
        ['short_code'],
        unique=True
    )

    op.create_index(
        'ix_short_urls_created_at',
        'short_urls',
        ['created_at']
    )


def downgrade() -> None:
    """
    Drop the short_urls table and its indexes.
    """
    op.drop_index('ix_short_urls_created_at', table_name='short_urls')
    op.drop_index('ix_short_urls_short_code', table_name='short_urls')
    op.drop_table('short_urls')
