from decimal import Decimal
from uuid import UUID

import pytest

from src.platform.exception.exceptions import ValidationError
from src.service.ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.ticketing.domain.entity.ticket_type_entity import TicketType


TICKET_TYPE_ID = UUID('01936d8f-5e73-7c4e-a9c5-123456789abc')
CUSTOMER_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')


@pytest.mark.unit
class TestTicketType:
    def test_create_defaults_available_to_quantity(self) -> None:
        ticket_type = TicketType.create(name='VIP Ticket', quantity=100, price='99.99')

        assert isinstance(ticket_type.id, UUID)
        assert ticket_type.available_quantity == Decimal('100')
        assert ticket_type.price == Decimal('99.99')

    @pytest.mark.parametrize('available', [-1, 101])
    def test_available_quantity_out_of_range(self, available: int) -> None:
        with pytest.raises(ValidationError):
            TicketType.create(
                name='VIP Ticket', quantity=100, price='99.99', available_quantity=available
            )

    def test_fractional_quantities_allowed(self) -> None:
        ticket_type = TicketType.create(
            name='Table share', quantity=Decimal('10.5'), price='5', available_quantity=Decimal('0.5')
        )

        assert ticket_type.available_quantity == Decimal('0.5')

    @pytest.mark.parametrize('name', ['', '   '])
    def test_blank_name_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError):
            TicketType.create(name=name, quantity=1, price='1')

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TicketType.create(name='VIP Ticket', quantity=1, price='-0.01')


@pytest.mark.unit
class TestOrder:
    def test_create_computes_total_and_links_items(self) -> None:
        items = [
            OrderItem.create(ticket_type_id=TICKET_TYPE_ID, quantity=2, price='99.99'),
            OrderItem.create(ticket_type_id=TICKET_TYPE_ID, quantity=1, price='10.00'),
        ]

        order = Order.create(customer_id=CUSTOMER_ID, items=items)

        assert order.total_price == Decimal('209.98')
        assert order.currency == 'USD'
        assert all(item.order_id == order.id for item in order.order_items)
        order.validate()

    def test_add_item_recomputes_total(self) -> None:
        order = Order.create(customer_id=CUSTOMER_ID, items=[])
        assert order.total_price == Decimal('0')

        order.add_item(OrderItem.create(ticket_type_id=TICKET_TYPE_ID, quantity=3, price='1.10'))

        assert order.total_price == Decimal('3.30')

    def test_validate_rejects_item_of_other_order(self) -> None:
        order = Order.create(
            customer_id=CUSTOMER_ID,
            items=[OrderItem.create(ticket_type_id=TICKET_TYPE_ID, quantity=1, price='1')],
        )
        order.order_items[0].order_id = CUSTOMER_ID

        with pytest.raises(ValidationError):
            order.validate()

    @pytest.mark.parametrize('quantity', [0, -1])
    def test_item_quantity_must_be_positive(self, quantity: int) -> None:
        with pytest.raises(ValidationError):
            OrderItem.create(ticket_type_id=TICKET_TYPE_ID, quantity=quantity, price='1')
