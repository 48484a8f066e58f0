from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticketing_routine_repo import ITicketingRoutineRepo


class GetTicketsLeftUseCase:
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
    async def get_tickets_left(self, *, ticket_type_id: UUID) -> int:
        """Remaining quantity of a ticket type; the routine returns NULL for unknown ids."""
        tickets_left = await self.ticketing_routine_repo.get_tickets_left(
            ticket_type_id=ticket_type_id
        )

        if tickets_left is None:
            Logger.base.warning(f'⚠️ [TICKETS_LEFT] Ticket type {ticket_type_id} not found')
            raise NotFoundError(f'Ticket type {ticket_type_id} not found')

        return tickets_left
