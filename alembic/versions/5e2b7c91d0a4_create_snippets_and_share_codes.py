"""create snippets and share_codes tables

Revision ID: 5e2b7c91d0a4
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5e2b7c91d0a4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'snippets',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('language', sa.Text(), nullable=False),
        sa.Column('code', sa.Text(), nullable=False),
        sa.Column('visibility', sa.Text(), server_default='PUBLIC', nullable=False),
        sa.Column('author_id', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("visibility IN ('PUBLIC', 'PRIVATE')", name='ck_snippets_visibility'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_snippets_author_id', 'snippets', ['author_id'])

    # Temporary share codes; the unique constraint on code backs the
    # insert-conflict retry in the service
    op.create_table(
        'share_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('snippet_id', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['snippet_id'], ['snippets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index('ix_share_codes_expires_at', 'share_codes', ['expires_at'])
    op.create_index(
        'ix_share_codes_snippet_id_created_at',
        'share_codes',
        ['snippet_id', 'created_at'],
    )


def downgrade() -> None:
    op.drop_index('ix_share_codes_snippet_id_created_at', table_name='share_codes')
    op.drop_index('ix_share_codes_expires_at', table_name='share_codes')
    op.drop_table('share_codes')
    op.drop_index('ix_snippets_author_id', table_name='snippets')
    op.drop_table('snippets')
