"""Create offer negotiation tables

Revision ID: a001_create_offer_negotiation
Revises:
Create Date: 2026-10-19

Creates trip requests, vendors, offers, counter offers, saved offers and
offer shares. A partial unique index keeps at most one accepted offer per
trip request.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision = 'a001_create_offer_negotiation'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'trip_requests',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('destination', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('group_size', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('budget', sa.Integer(), nullable=True),  # minor currency units
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'open'")),
        sa.Column('selected_vendor_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_trip_requests_user_id', 'trip_requests', ['user_id'])
    op.create_index('ix_trip_requests_user_status', 'trip_requests', ['user_id', 'status'])

    op.create_table(
        'vendors',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('business_name', sa.String(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('total_reviews', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )

    op.create_table(
        'offers',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('trip_request_id', sa.String(), sa.ForeignKey('trip_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('vendor_id', sa.String(), sa.ForeignKey('vendors.id'), nullable=False),
        sa.Column('proposed_price', sa.Integer(), nullable=False),
        sa.Column('price_breakdown', JSONB(), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('valid_until', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_offers_trip_request_id', 'offers', ['trip_request_id'])
    op.create_index('ix_offers_vendor_id', 'offers', ['vendor_id'])
    op.create_index('ix_offers_trip_request_status', 'offers', ['trip_request_id', 'status'])

    # Storage guard: a second accept on the same trip request fails here.
    op.create_index(
        'uq_offers_one_accepted_per_trip_request',
        'offers',
        ['trip_request_id'],
        unique=True,
        postgresql_where=sa.text("status = 'accepted'"),
    )

    op.create_table(
        'counter_offers',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('original_offer_id', sa.String(), sa.ForeignKey('offers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('proposed_price', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('modifications', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_counter_offers_original_offer_id', 'counter_offers', ['original_offer_id'])

    op.create_table(
        'saved_offers',
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('offer_id', sa.String(), sa.ForeignKey('offers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('saved_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('user_id', 'offer_id', name='pk_saved_offers'),
    )
    op.create_index('ix_saved_offers_user_saved_at', 'saved_offers', ['user_id', 'saved_at'])

    op.create_table(
        'offer_shares',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('offer_id', sa.String(), sa.ForeignKey('offers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('group_id', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('shared_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_offer_shares_offer_id', 'offer_shares', ['offer_id'])
    op.create_index('ix_offer_shares_group_id', 'offer_shares', ['group_id'])


def downgrade() -> None:
    op.drop_index('ix_offer_shares_group_id', table_name='offer_shares')
    op.drop_index('ix_offer_shares_offer_id', table_name='offer_shares')
    op.drop_table('offer_shares')

    op.drop_index('ix_saved_offers_user_saved_at', table_name='saved_offers')
    op.drop_table('saved_offers')

    op.drop_index('ix_counter_offers_original_offer_id', table_name='counter_offers')
    op.drop_table('counter_offers')

    op.drop_index('uq_offers_one_accepted_per_trip_request', table_name='offers')
    op.drop_index('ix_offers_trip_request_status', table_name='offers')
    op.drop_index('ix_offers_vendor_id', table_name='offers')
    op.drop_index('ix_offers_trip_request_id', table_name='offers')
    op.drop_table('offers')

    op.drop_table('vendors')

    op.drop_index('ix_trip_requests_user_status', table_name='trip_requests')
    op.drop_index('ix_trip_requests_user_id', table_name='trip_requests')
    op.drop_table('trip_requests')
