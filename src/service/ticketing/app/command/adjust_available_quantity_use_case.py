from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticketing_routine_repo import ITicketingRoutineRepo


class AdjustAvailableQuantityUseCase:
    """
    Apply a signed delta to a ticket type's available quantity.

    The range check and the row lock live in the adjust_available_quantity
    procedure; concurrent adjustments are serialized by the database.
    """

    def __init__(self, ticketing_routine_repo: ITicketingRoutineRepo) -> None:
        self.ticketing_routine_repo = ticketing_routine_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticketing_routine_repo: ITicketingRoutineRepo = Depends(
            Provide[Container.ticketing_routine_repo]
        ),
    ) -> Self:
        return cls(ticketing_routine_repo=ticketing_routine_repo)

    @Logger.io
    async def adjust(self, *, ticket_type_id: UUID, delta: int) -> None:
        Logger.base.info(f'🎫 [ADJUST] Ticket type {ticket_type_id} delta={delta}')
        await self.ticketing_routine_repo.adjust_available_quantity(
            ticket_type_id=ticket_type_id, delta=delta
        )
        Logger.base.info(f'✅ [ADJUST] Ticket type {ticket_type_id} adjusted')
