"""round_tickets_left_down

Revision ID: 0003
Revises: 0002
Create Date: 2026-01-12

tickets_left reports whole sellable tickets: a fractional remainder is
rounded down instead of half away from zero.
"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0003'
down_revision: Union[str, Sequence[str], None] = '0002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tickets_left(expression: str) -> str:
    return f"""
CREATE OR REPLACE FUNCTION ticketing.tickets_left(p_ticket_type_id uuid)
RETURNS integer
LANGUAGE sql
STABLE
AS $$
    SELECT {expression}
    FROM ticketing.ticket_types AS tt
    WHERE tt.id = p_ticket_type_id
$$
"""


def upgrade() -> None:
    op.execute(_tickets_left('floor(tt.available_quantity)::integer'))


def downgrade() -> None:
    op.execute(_tickets_left('tt.available_quantity::integer'))
