"""
Seed Demo Data Use Case

Persists one ticket type and one order for a fresh customer through the
unit of work, all in a single commit.
"""

from decimal import Decimal
from typing import Self
from uuid import UUID

import attrs
from fastapi import Depends
from uuid_utils.compat import uuid7

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.ticketing.domain.entity.ticket_type_entity import TicketType


DEMO_TICKET_TYPE_NAME = 'VIP Ticket'
DEMO_TICKET_QUANTITY = 100
DEMO_TICKET_PRICE = Decimal('99.99')
DEMO_ORDER_ITEM_QUANTITY = 2


@attrs.frozen
class SeedResult:
    customer_id: UUID
    ticket_type_id: UUID


class SeedDemoDataUseCase:
    def __init__(self, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def seed(self) -> SeedResult:
        ticket_type = TicketType.create(
            name=DEMO_TICKET_TYPE_NAME,
            quantity=DEMO_TICKET_QUANTITY,
            price=DEMO_TICKET_PRICE,
        )
        customer_id = uuid7()
        order = Order.create(
            customer_id=customer_id,
            items=[
                OrderItem.create(
                    ticket_type_id=ticket_type.id,  # type: ignore[arg-type]
                    quantity=DEMO_ORDER_ITEM_QUANTITY,
                    price=ticket_type.price,
                )
            ],
        )

        async with self.uow:
            self.uow.register(ticket_type)
            self.uow.register(order)
            await self.uow.commit()

        Logger.base.info(
            f'🌱 [SEED] Ticket type {ticket_type.id}, order {order.id} '
            f'for customer {customer_id} (total {order.total_price} {order.currency})'
        )
        return SeedResult(customer_id=customer_id, ticket_type_id=ticket_type.id)  # type: ignore[arg-type]
