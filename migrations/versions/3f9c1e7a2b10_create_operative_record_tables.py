"""create operative record tables

Revision ID: 3f9c1e7a2b10
Revises:
Create Date: 2026-10-19 09:12:44.102311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1e7a2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # 1. operatives
    op.create_table(
        'operatives',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('kind', sa.String(length=16), nullable=False, server_default='custodian'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('base_zone', sa.String(length=128), nullable=True),
        sa.Column('service_preference', sa.String(length=16), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('last_service_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_operatives_phone', 'operatives', ['phone'])

    # 2. assignment_records
    op.create_table(
        'assignment_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operative_id', sa.String(length=64), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=True),
        sa.Column('planning_state', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_assignment_records_operative_id', 'assignment_records', ['operative_id'])

    # 3. execution_records
    op.create_table(
        'execution_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=True),
        sa.Column('operative_name', sa.String(length=255), nullable=True),
        sa.Column('operative_phone', sa.String(length=32), nullable=True),
        sa.Column('state', sa.String(length=32), nullable=True),
        sa.Column('scheduled_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('checked_in_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('distance_km', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('operative_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('client_charge', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('service_scope', sa.String(length=16), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_execution_records_operative_name', 'execution_records', ['operative_name'])
    op.create_index('ix_execution_records_scheduled_at', 'execution_records', ['scheduled_at'])
    op.create_index('ix_execution_records_name_scheduled', 'execution_records', ['operative_name', 'scheduled_at'])

    # 4. rejection_records
    op.create_table(
        'rejection_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operative_id', sa.String(length=64), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=True),
        sa.Column('rejected_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rejection_records_operative_id', 'rejection_records', ['operative_id'])

    # 5. checklist_records
    op.create_table(
        'checklist_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operative_phone', sa.String(length=32), nullable=False),
        sa.Column('service_id', sa.String(length=64), nullable=True),
        sa.Column('state', sa.String(length=16), nullable=False),
        sa.Column('filed_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_checklist_records_operative_phone', 'checklist_records', ['operative_phone'])

    # 6. document_records
    op.create_table(
        'document_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('operative_phone', sa.String(length=32), nullable=False),
        sa.Column('doc_type', sa.String(length=64), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('expires_on', sa.Date(), nullable=True),
        sa.Column('uploaded_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_document_records_operative_phone', 'document_records', ['operative_phone'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('document_records')
    op.drop_table('checklist_records')
    op.drop_table('rejection_records')
    op.drop_table('execution_records')
    op.drop_table('assignment_records')
    op.drop_table('operatives')
