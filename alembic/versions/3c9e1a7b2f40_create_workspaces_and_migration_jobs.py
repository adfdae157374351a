"""create workspaces and migration_jobs tables

Revision ID: 3c9e1a7b2f40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c9e1a7b2f40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'workspaces',
        sa.Column('user_id', sa.String(length=128), primary_key=True),
        sa.Column('app_details', JSONType, nullable=False),
        sa.Column('architecture', JSONType, nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(), nullable=False),
    )
    op.create_table(
        'migration_jobs',
        sa.Column('job_id', sa.String(length=36).with_variant(postgresql.UUID(as_uuid=True), "postgresql"), primary_key=True),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('app_name', sa.String(length=255), nullable=True),
        sa.Column('source_component_id', sa.Integer(), nullable=False),
        sa.Column('source_component_name', sa.String(length=255), nullable=False),
        sa.Column('source_details', JSONType, nullable=True),
        sa.Column('target_component_name', sa.String(length=255), nullable=False),
        sa.Column('target_region', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('job_ref', sa.String(length=16), nullable=False),
        sa.Column('requested_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(), nullable=False),
    )
    op.create_index('idx_user_jobs', 'migration_jobs', ['user_id', 'requested_at'])
    op.create_index('idx_job_status', 'migration_jobs', ['status'])


def downgrade() -> None:
    op.drop_index('idx_job_status', table_name='migration_jobs')
    op.drop_index('idx_user_jobs', table_name='migration_jobs')
    op.drop_table('migration_jobs')
    op.drop_table('workspaces')
