from datetime import datetime
from decimal import Decimal
from uuid import UUID

import attrs


@attrs.frozen
class OrderSummary:
    """One row of ticketing.customer_order_summary, read-only."""

    order_id: UUID
    created_at_utc: datetime
    total_price: Decimal
    currency: str
    item_count: int
