"""Initial database schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = (
    'pending', 'accepted', 'in_preparation', 'in_delivery',
    'awaiting_material_return', 'completed', 'cancelled',
)


def upgrade() -> None:
    order_status = sa.Enum(*ORDER_STATUSES, name='orderstatus')
    # Same type, already created with the orders table
    existing_order_status = postgresql.ENUM(*ORDER_STATUSES, name='orderstatus', create_type=False)

    # === USERS TABLE ===
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('postal_address', sa.String(500), nullable=True),
        sa.Column('role', sa.Enum('admin', 'employee', 'customer', name='userrole'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # === MENUS TABLE ===
    op.create_table(
        'menus',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('min_headcount', sa.Integer(), nullable=False),
        sa.Column('price_per_person', sa.Float(), nullable=False),
        sa.Column('remaining_quantity', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_menus_id', 'menus', ['id'])

    # === ORDERS TABLE ===
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(50), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('delivery_time', sa.Time(), nullable=False),
        sa.Column('menu_price', sa.Float(), nullable=False),
        sa.Column('delivery_fee', sa.Float(), nullable=False),
        sa.Column('headcount', sa.Integer(), nullable=False),
        sa.Column('service_address', sa.String(500), nullable=False),
        sa.Column('status', order_status, nullable=False),
        sa.Column('material_loan', sa.Boolean(), nullable=False),
        sa.Column('material_returned', sa.Boolean(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_user_created', 'orders', ['user_id', 'created_at'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    # === ORDER_MENUS TABLE ===
    op.create_table(
        'order_menus',
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('menu_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['menu_id'], ['menus.id']),
        sa.PrimaryKeyConstraint('order_id')
    )
    op.create_index('ix_order_menus_menu_id', 'order_menus', ['menu_id'])

    # === ORDER_STATUS_HISTORY TABLE ===
    op.create_table(
        'order_status_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('previous_status', existing_order_status, nullable=True),
        sa.Column('new_status', existing_order_status, nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('cancellation_reason', sa.String(500), nullable=True),
        sa.Column('contact_mode', sa.Enum('phone', 'email', name='contactmode'), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_status_history_id', 'order_status_history', ['id'])
    op.create_index('ix_order_status_history_order_id', 'order_status_history', ['order_id'])

    # === ORDER_EVENTS TABLE (outbox) ===
    op.create_table(
        'order_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('dispatched_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.String(500), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_events_id', 'order_events', ['id'])
    op.create_index('ix_order_events_pending', 'order_events', ['dispatched_at', 'id'])


def downgrade() -> None:
    op.drop_table('order_events')
    op.drop_table('order_status_history')
    op.drop_table('order_menus')
    op.drop_table('orders')
    op.drop_table('menus')
    op.drop_table('users')

    # Drop enums
    op.execute('DROP TYPE IF EXISTS contactmode')
    op.execute('DROP TYPE IF EXISTS orderstatus')
    op.execute('DROP TYPE IF EXISTS userrole')
