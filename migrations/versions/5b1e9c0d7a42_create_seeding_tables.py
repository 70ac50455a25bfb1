"""create seeding tables

Revision ID: 5b1e9c0d7a42
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e9c0d7a42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'seeding_projects',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('brand', sa.String(length=20), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('target_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('cost_price', sa.Numeric(12, 2), server_default=sa.text('0'), nullable=False),
        sa.Column('selling_price', sa.Numeric(12, 2), server_default=sa.text('0'), nullable=False),
        sa.Column('status', sa.String(length=20), server_default=sa.text("'planning'"), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assignee_id', sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_seeding_projects_brand', 'seeding_projects', ['brand'])

    op.create_table(
        'seeding_influencers',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('project_id', sa.String(length=36), sa.ForeignKey('seeding_projects.id', ondelete='CASCADE'), nullable=True),
        sa.Column('account_id', sa.String(length=255), nullable=False),
        sa.Column('account_name', sa.String(length=255), nullable=True),
        sa.Column('platform', sa.String(length=20), server_default=sa.text("'instagram'"), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('follower_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('following_count', sa.Integer(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('profile_url', sa.String(length=500), nullable=True),
        sa.Column('seeding_type', sa.String(length=10), server_default=sa.text("'free'"), nullable=False),
        sa.Column('content_type', sa.String(length=10), server_default=sa.text("'story'"), nullable=False),
        sa.Column('fee', sa.Numeric(12, 2), server_default=sa.text('0'), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('product_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.String(length=20), server_default=sa.text("'listed'"), nullable=False),
        sa.Column('listed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('contacted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.String(length=255), nullable=True),
        sa.Column('guide_id', sa.String(length=36), nullable=True),
        sa.Column('guide_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('guide_link', sa.String(length=500), nullable=True),
        sa.Column('expected_posting_date', sa.Date(), nullable=True),
        sa.Column('posting_url', sa.String(length=500), nullable=True),
        sa.Column('posted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shipping', sa.JSON(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('performance', sa.JSON(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('assignee_id', sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_seeding_influencers_project_status', 'seeding_influencers', ['project_id', 'status'])
    op.create_index('ix_seeding_influencers_account_id', 'seeding_influencers', ['account_id'])

    op.create_table(
        'outreach_templates',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('seeding_type', sa.String(length=10), server_default=sa.text("'all'"), nullable=False),
        sa.Column('content_type', sa.String(length=10), server_default=sa.text("'all'"), nullable=False),
        sa.Column('brand', sa.String(length=20), server_default=sa.text("'all'"), nullable=False),
        sa.Column('variables', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('usage_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'product_guides',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('product_id', sa.String(length=36), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('brand', sa.String(length=20), nullable=False),
        sa.Column('content_type', sa.String(length=10), server_default=sa.text("'story'"), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('key_points', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('hashtags', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('mentions', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('dos', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('donts', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('link_url', sa.String(length=500), nullable=True),
        sa.Column('image_urls', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('reference_urls', sa.JSON(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('public_slug', sa.String(length=64), nullable=True, unique=True),
        sa.Column('is_public', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('updated_by', sa.String(length=36), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'sku_masters',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('sku_code', sa.String(length=100), nullable=False, unique=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('brand', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('cost_price', sa.Numeric(12, 2), server_default=sa.text('0'), nullable=False),
        sa.Column('selling_price', sa.Numeric(12, 2), server_default=sa.text('0'), nullable=False),
        sa.Column('effective_date', sa.Date(), nullable=False),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        sa.Column('supplier', sa.String(length=255), nullable=True),
        sa.Column('min_stock', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('current_stock', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('sku_masters')
    op.drop_table('product_guides')
    op.drop_table('outreach_templates')
    op.drop_index('ix_seeding_influencers_account_id', table_name='seeding_influencers')
    op.drop_index('ix_seeding_influencers_project_status', table_name='seeding_influencers')
    op.drop_table('seeding_influencers')
    op.drop_index('ix_seeding_projects_brand', table_name='seeding_projects')
    op.drop_table('seeding_projects')
