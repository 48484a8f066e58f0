"""
Ticketing Routine Repository Implementation

Catalogue of the ticketing schema's server-side routines, executed through
the typed RoutineExecutor.
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.config.core_setting import settings
from src.platform.database.routine_executor import (
    Routine,
    RoutineExecutor,
    RoutineKind,
    RoutineParam,
)
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.order_summary_dto import OrderSummary
from src.service.ticketing.app.interface.i_ticketing_routine_repo import ITicketingRoutineRepo


TICKETS_LEFT = Routine(
    schema=settings.DB_SCHEMA,
    name='tickets_left',
    kind=RoutineKind.SCALAR,
    params=(RoutineParam('ticket_type_id', 'uuid'),),
)

CUSTOMER_ORDER_SUMMARY = Routine(
    schema=settings.DB_SCHEMA,
    name='customer_order_summary',
    kind=RoutineKind.TABLE,
    params=(RoutineParam('customer_id', 'uuid'),),
)

ADJUST_AVAILABLE_QUANTITY = Routine(
    schema=settings.DB_SCHEMA,
    name='adjust_available_quantity',
    kind=RoutineKind.PROCEDURE,
    params=(
        RoutineParam('ticket_type_id', 'uuid'),
        RoutineParam('delta', 'integer'),
    ),
)


class TicketingRoutineRepoImpl(ITicketingRoutineRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_tickets_left(self, *, ticket_type_id: UUID) -> Optional[int]:
        async with self._get_session() as session:
            return await RoutineExecutor(session).fetch_scalar(
                TICKETS_LEFT, {'ticket_type_id': ticket_type_id}, result_type=int
            )

    @Logger.io
    async def list_customer_order_summaries(self, *, customer_id: UUID) -> List[OrderSummary]:
        async with self._get_session() as session:
            return await RoutineExecutor(session).fetch_all(
                CUSTOMER_ORDER_SUMMARY, {'customer_id': customer_id}, shape=OrderSummary
            )

    @Logger.io
    async def adjust_available_quantity(self, *, ticket_type_id: UUID, delta: int) -> None:
        async with self._get_session() as session:
            await RoutineExecutor(session).call_procedure(
                ADJUST_AVAILABLE_QUANTITY, {'ticket_type_id': ticket_type_id, 'delta': delta}
            )
