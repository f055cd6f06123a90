"""Create claims and attachments tables

Revision ID: claims_v1
Revises:
Create Date: 2025-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'claims_v1'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('claims',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lecturer_name', sa.String(length=200), nullable=False),
        sa.Column('claim_period', sa.Date(), nullable=False),
        sa.Column('hours_worked', sa.Numeric(precision=7, scale=2), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Draft'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_claims_id'), 'claims', ['id'], unique=False)
    op.create_index(op.f('ix_claims_lecturer_name'), 'claims', ['lecturer_name'], unique=False)
    op.create_index('idx_claims_status_period', 'claims', ['status', 'claim_period'], unique=False)

    op.create_table('attachments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('claim_id', sa.Integer(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.String(length=50), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('uploaded_by', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['claim_id'], ['claims.id'], name='fk_attachments_claim_id', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_attachments_id'), 'attachments', ['id'], unique=False)
    op.create_index(op.f('ix_attachments_claim_id'), 'attachments', ['claim_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_attachments_claim_id'), table_name='attachments')
    op.drop_index(op.f('ix_attachments_id'), table_name='attachments')
    op.drop_table('attachments')

    op.drop_index('idx_claims_status_period', table_name='claims')
    op.drop_index(op.f('ix_claims_lecturer_name'), table_name='claims')
    op.drop_index(op.f('ix_claims_id'), table_name='claims')
    op.drop_table('claims')
