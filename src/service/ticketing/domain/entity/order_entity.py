from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger


DEFAULT_CURRENCY = 'USD'


@attrs.define
class OrderItem:
    ticket_type_id: UUID
    quantity: int
    price: Decimal = attrs.field(converter=Decimal)  # unit price at the time of purchase
    order_id: Optional[UUID] = None
    id: Optional[UUID] = None

    @classmethod
    def create(
        cls, *, ticket_type_id: UUID, quantity: int, price: Decimal | str
    ) -> 'OrderItem':
        item = cls(id=uuid7(), ticket_type_id=ticket_type_id, quantity=quantity, price=price)
        item.validate()
        return item

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.price

    def validate(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError('Order item quantity must be an integer')
        if self.quantity <= 0:
            raise ValidationError('Order item quantity must be positive')
        if self.price < 0:
            raise ValidationError('Order item price must not be negative')


@attrs.define
class Order:
    customer_id: UUID
    total_price: Decimal = attrs.field(converter=Decimal)
    currency: str = DEFAULT_CURRENCY
    # None until the database default fills it in on insert
    created_at_utc: Optional[datetime] = None
    order_items: List[OrderItem] = attrs.field(factory=list)
    id: Optional[UUID] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        customer_id: UUID,
        items: List[OrderItem],
        currency: str = DEFAULT_CURRENCY,
    ) -> 'Order':
        order = cls(id=uuid7(), customer_id=customer_id, total_price=Decimal('0'), currency=currency)
        for item in items:
            order.add_item(item)
        return order

    def add_item(self, item: OrderItem) -> None:
        item.order_id = self.id
        self.order_items.append(item)
        self.total_price = self.items_total()

    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.order_items), Decimal('0'))

    def validate(self) -> None:
        if not self.currency or not self.currency.strip():
            raise ValidationError('Order currency must not be empty')
        if self.total_price < 0:
            raise ValidationError('Order total_price must not be negative')
        for item in self.order_items:
            item.validate()
            if item.order_id != self.id:
                raise ValidationError(f'Order item {item.id} does not belong to order {self.id}')
        if self.total_price != self.items_total():
            raise ValidationError(
                f'Order total_price {self.total_price} does not match items total '
                f'{self.items_total()}'
            )
