"""Initial migration - Create companies, reviews, logs and system_config tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create companies table
    op.create_table(
        'companies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('google_place_id', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('google_account_id', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('google_connected', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('access_token', sa.Text(), nullable=False, server_default=''),
        sa.Column('refresh_token', sa.Text(), nullable=False, server_default=''),
        sa.Column('automation_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_companies_google_connected', 'companies', ['google_connected'])

    # Create reviews table
    op.create_table(
        'reviews',
        sa.Column('id', sa.String(length=512), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.Column('author', sa.String(length=255), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('comment', sa.Text(), nullable=False, server_default=''),
        sa.Column('answered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reply', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reviews_company_answered', 'reviews', ['company_id', 'answered'])
    op.create_index('ix_reviews_created_at', 'reviews', ['created_at'])

    # Create logs table
    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('level', sa.String(length=20), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_logs_id', 'logs', ['id'])
    op.create_index('ix_logs_level_created', 'logs', ['level', 'created_at'])

    # Create system_config table
    op.create_table(
        'system_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('google_client_id', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('google_client_secret', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('openai_api_key', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('system_config')
    op.drop_table('logs')
    op.drop_table('reviews')
    op.drop_table('companies')
