"""create_ticketing_routines

Revision ID: 0002
Revises: 0001
Create Date: 2025-12-20

Server-side routines called through the routine executor:
- tickets_left(uuid) -> integer, NULL for an unknown ticket type
- customer_order_summary(uuid) -> one row per order of the customer
- adjust_available_quantity(uuid, integer) procedure; locks the row,
  raises no_data_found (P0002) for an unknown ticket type and
  check_violation (23514) when the result leaves 0..quantity

CREATE OR REPLACE keeps the upgrade re-runnable.
"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, Sequence[str], None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


TICKETS_LEFT = """
CREATE OR REPLACE FUNCTION ticketing.tickets_left(p_ticket_type_id uuid)
RETURNS integer
LANGUAGE sql
STABLE
AS $$
    SELECT tt.available_quantity::integer
    FROM ticketing.ticket_types AS tt
    WHERE tt.id = p_ticket_type_id
$$
"""

CUSTOMER_ORDER_SUMMARY = """
CREATE OR REPLACE FUNCTION ticketing.customer_order_summary(p_customer_id uuid)
RETURNS TABLE (
    order_id uuid,
    created_at_utc timestamptz,
    total_price numeric,
    currency text,
    item_count integer
)
LANGUAGE sql
STABLE
AS $$
    SELECT o.id,
           o.created_at_utc,
           o.total_price,
           o.currency::text,
           COUNT(oi.id)::integer
    FROM ticketing.orders AS o
    LEFT JOIN ticketing.order_items AS oi ON oi.order_id = o.id
    WHERE o.customer_id = p_customer_id
    GROUP BY o.id, o.created_at_utc, o.total_price, o.currency
    ORDER BY o.created_at_utc, o.id
$$
"""

# Messages are built by concatenation to keep '%' out of the DDL text
ADJUST_AVAILABLE_QUANTITY = """
CREATE OR REPLACE PROCEDURE ticketing.adjust_available_quantity(
    p_ticket_type_id uuid,
    p_delta integer
)
LANGUAGE plpgsql
AS $$
DECLARE
    v_quantity numeric;
    v_available numeric;
BEGIN
    SELECT tt.quantity, tt.available_quantity
      INTO v_quantity, v_available
      FROM ticketing.ticket_types AS tt
     WHERE tt.id = p_ticket_type_id
       FOR UPDATE;

    IF NOT FOUND THEN
        RAISE EXCEPTION USING
            ERRCODE = 'no_data_found',
            MESSAGE = 'Ticket type ' || p_ticket_type_id || ' not found';
    END IF;

    IF v_available + p_delta < 0 OR v_available + p_delta > v_quantity THEN
        RAISE EXCEPTION USING
            ERRCODE = 'check_violation',
            MESSAGE = 'Adjusting ticket type ' || p_ticket_type_id || ' by ' || p_delta
                || ' would leave available quantity outside 0..' || v_quantity
                || ' (currently ' || v_available || ')';
    END IF;

    UPDATE ticketing.ticket_types
       SET available_quantity = available_quantity + p_delta
     WHERE id = p_ticket_type_id;
END
$$
"""


def upgrade() -> None:
    op.execute(TICKETS_LEFT)
    op.execute(CUSTOMER_ORDER_SUMMARY)
    op.execute(ADJUST_AVAILABLE_QUANTITY)


def downgrade() -> None:
    op.execute('DROP PROCEDURE IF EXISTS ticketing.adjust_available_quantity(uuid, integer)')
    op.execute('DROP FUNCTION IF EXISTS ticketing.customer_order_summary(uuid)')
    op.execute('DROP FUNCTION IF EXISTS ticketing.tickets_left(uuid)')
