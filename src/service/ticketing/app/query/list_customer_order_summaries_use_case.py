from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.order_summary_dto import OrderSummary
from src.service.ticketing.app.interface.i_ticketing_routine_repo import ITicketingRoutineRepo


class ListCustomerOrderSummariesUseCase:
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
    async def list_by_customer(self, *, customer_id: UUID) -> List[OrderSummary]:
        summaries = await self.ticketing_routine_repo.list_customer_order_summaries(
            customer_id=customer_id
        )
        Logger.base.info(
            f'📋 [ORDER_SUMMARY] {len(summaries)} order(s) for customer {customer_id}'
        )
        return summaries
