"""create_ticketing_schema

Revision ID: 0001
Revises:
Create Date: 2025-12-20

Schema `ticketing`:
- ticket_types: ticket inventory, CHECK 0 <= available_quantity <= quantity
- orders: customer orders (created_at_utc defaults to now())
- order_items: order lines, FK to orders with ON DELETE CASCADE

order_items.ticket_type_id is a soft reference and has no foreign key.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = 'ticketing'


def upgrade() -> None:
    """Create the ticketing schema and its tables."""
    op.execute(f'CREATE SCHEMA IF NOT EXISTS {SCHEMA}')

    op.create_table(
        'orders',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('customer_id', UUID(as_uuid=True), nullable=False),
        sa.Column(
            'created_at_utc',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column('total_price', sa.Numeric(), nullable=False),
        sa.Column('currency', sa.String(), server_default='USD', nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        schema=SCHEMA,
    )

    op.create_table(
        'ticket_types',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(), nullable=False),
        sa.Column('available_quantity', sa.Numeric(), nullable=False),
        sa.Column('price', sa.Numeric(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_ticket_types'),
        sa.CheckConstraint(
            'available_quantity >= 0 AND available_quantity <= quantity',
            name='ck_ticket_types_available_quantity_range',
        ),
        schema=SCHEMA,
    )

    op.create_table(
        'order_items',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('ticket_type_id', UUID(as_uuid=True), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
        sa.ForeignKeyConstraint(
            ['order_id'],
            [f'{SCHEMA}.orders.id'],
            name='fk_order_items_orders_order_id',
            ondelete='CASCADE',
        ),
        schema=SCHEMA,
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'], schema=SCHEMA)


def downgrade() -> None:
    """Drop the tables; the schema stays because it holds alembic_version."""
    op.drop_index('ix_order_items_order_id', table_name='order_items', schema=SCHEMA)
    op.drop_table('order_items', schema=SCHEMA)
    op.drop_table('ticket_types', schema=SCHEMA)
    op.drop_table('orders', schema=SCHEMA)
