from decimal import Decimal
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger


@attrs.define
class TicketType:
    """
    Inventory of one kind of ticket.

    `available_quantity` only changes through the adjust_available_quantity
    procedure once the row exists; updates staged on the unit of work never
    write it.
    """

    name: str
    quantity: Decimal = attrs.field(converter=Decimal)
    available_quantity: Decimal = attrs.field(converter=Decimal)
    price: Decimal = attrs.field(converter=Decimal)
    id: Optional[UUID] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        name: str,
        quantity: Decimal | int,
        price: Decimal | str,
        available_quantity: Decimal | int | None = None,
    ) -> 'TicketType':
        ticket_type = cls(
            id=uuid7(),
            name=name,
            quantity=quantity,
            available_quantity=quantity if available_quantity is None else available_quantity,
            price=price,
        )
        ticket_type.validate()
        return ticket_type

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError('Ticket type name must not be empty')
        if self.quantity < 0:
            raise ValidationError('Ticket type quantity must not be negative')
        if self.price < 0:
            raise ValidationError('Ticket type price must not be negative')
        if not (0 <= self.available_quantity <= self.quantity):
            raise ValidationError(
                f'available_quantity must be between 0 and {self.quantity}, '
                f'got {self.available_quantity}'
            )
