"""Add profiles - dashboard users scoped to one community

Revision ID: 0002
Revises: 0001
Create Date: 2025-03-15

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('access_token', sa.String(length=128), nullable=False),
        sa.Column('community_id', sa.String(length=36), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['community_id'], ['communities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_profiles_access_token', 'profiles', ['access_token'], unique=True)
    op.create_index('ix_profiles_community_id', 'profiles', ['community_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_profiles_community_id', table_name='profiles')
    op.drop_index('ix_profiles_access_token', table_name='profiles')
    op.drop_table('profiles')
