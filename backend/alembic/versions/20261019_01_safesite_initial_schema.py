"""create safesite users, hazard zones, protocols and compliance logs"""

from alembic import op
import sqlalchemy as sa
from typing import Sequence, Union

revision: str = '20261019_01'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('username', sa.String(255), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(50)),
        sa.Column('last_name', sa.String(50)),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'hazard_zones',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('color', sa.String(7), nullable=False, server_default='#16a34a'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'protocols',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('frequency', sa.String(20), nullable=False),
        sa.Column('target_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_protocols_user_id', 'protocols', ['user_id'])
    op.create_table(
        'protocol_zones',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('protocol_id', sa.UUID(as_uuid=True), sa.ForeignKey('protocols.id', ondelete='CASCADE'), nullable=False),
        sa.Column('zone_id', sa.UUID(as_uuid=True), sa.ForeignKey('hazard_zones.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_protocol_zones_protocol_id', 'protocol_zones', ['protocol_id'])
    op.create_index('ix_protocol_zones_zone_id', 'protocol_zones', ['zone_id'])
    op.create_table(
        'compliance_logs',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('protocol_id', sa.UUID(as_uuid=True), sa.ForeignKey('protocols.id', ondelete='CASCADE'), nullable=False),
        sa.Column('completion_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('note', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index(
        'ix_compliance_logs_protocol_completion',
        'compliance_logs',
        ['protocol_id', 'completion_date'],
    )


def downgrade() -> None:
    op.drop_index('ix_compliance_logs_protocol_completion', table_name='compliance_logs')
    op.drop_table('compliance_logs')
    op.drop_index('ix_protocol_zones_zone_id', table_name='protocol_zones')
    op.drop_index('ix_protocol_zones_protocol_id', table_name='protocol_zones')
    op.drop_table('protocol_zones')
    op.drop_index('ix_protocols_user_id', table_name='protocols')
    op.drop_table('protocols')
    op.drop_table('hazard_zones')
    op.drop_table('users')
