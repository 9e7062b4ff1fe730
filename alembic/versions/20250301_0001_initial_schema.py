"""Initial schema - communities, device keys, sensor data and alerts

Revision ID: 0001
Revises:
Create Date: 2025-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create communities table
    op.create_table(
        'communities',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )

    # Create device_api_keys table
    op.create_table(
        'device_api_keys',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('api_key', sa.String(length=128), nullable=False),
        sa.Column('community_id', sa.String(length=36), nullable=False),
        sa.Column('device_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['community_id'], ['communities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_device_api_keys_api_key', 'device_api_keys', ['api_key'], unique=True)
    op.create_index('ix_device_api_keys_community_id', 'device_api_keys', ['community_id'], unique=False)

    # Create sensor_data table
    op.create_table(
        'sensor_data',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('community_id', sa.String(length=36), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('soil_moisture', sa.Float(), nullable=True),
        sa.Column('rainfall', sa.Float(), nullable=True),
        sa.Column('ph', sa.Float(), nullable=True),
        sa.Column('humidity', sa.Float(), nullable=True),
        sa.Column('temperature', sa.Float(), nullable=True),
        sa.Column('turbidity', sa.Float(), nullable=True),
        sa.Column('ozone', sa.Float(), nullable=True),
        sa.Column('ammonia', sa.Float(), nullable=True),
        sa.Column('co2', sa.Float(), nullable=True),
        sa.Column('tilt_x', sa.Float(), nullable=True),
        sa.Column('tilt_y', sa.Float(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['community_id'], ['communities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sensor_data_community_id', 'sensor_data', ['community_id'], unique=False)
    op.create_index('ix_sensor_data_created_at', 'sensor_data', ['created_at'], unique=False)

    # Create alerts table
    op.create_table(
        'alerts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('community_id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('severity', sa.String(length=10), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('sensor_data_id', sa.String(length=36), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("type IN ('weather', 'irrigation', 'soil', 'pest', 'other')", name='ck_alerts_type'),
        sa.CheckConstraint("severity IN ('low', 'medium', 'high')", name='ck_alerts_severity'),
        sa.ForeignKeyConstraint(['community_id'], ['communities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sensor_data_id'], ['sensor_data.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_alerts_community_id', 'alerts', ['community_id'], unique=False)
    op.create_index('ix_alerts_created_at', 'alerts', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_alerts_created_at', table_name='alerts')
    op.drop_index('ix_alerts_community_id', table_name='alerts')
    op.drop_table('alerts')
    op.drop_index('ix_sensor_data_created_at', table_name='sensor_data')
    op.drop_index('ix_sensor_data_community_id', table_name='sensor_data')
    op.drop_table('sensor_data')
    op.drop_index('ix_device_api_keys_community_id', table_name='device_api_keys')
    op.drop_index('ix_device_api_keys_api_key', table_name='device_api_keys')
    op.drop_table('device_api_keys')
    op.drop_table('communities')
