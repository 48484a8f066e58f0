"""
Ticketing Routine Repository Interface

Access to the server-side routines of the ticketing schema
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.ticketing.app.dto.order_summary_dto import OrderSummary


class ITicketingRoutineRepo(ABC):
    @abstractmethod
    async def get_tickets_left(self, *, ticket_type_id: UUID) -> Optional[int]:
        """Remaining quantity of a ticket type; None when the ticket type does not exist."""
        pass

    @abstractmethod
    async def list_customer_order_summaries(self, *, customer_id: UUID) -> List[OrderSummary]:
        pass

    @abstractmethod
    async def adjust_available_quantity(self, *, ticket_type_id: UUID, delta: int) -> None:
        """
        Apply a signed delta to available_quantity atomically.

        Raises NotFoundError for an unknown ticket type and ConstraintError when
        the result would leave the 0..quantity range.
        """
        pass
