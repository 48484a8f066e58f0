"""
Persistence mappings for the ticketing entities

Tells the unit of work which table each entity lives in, how to turn it
into a row and which invariants to check before flushing.
"""

from typing import Any, Sequence

from src.platform.database.unit_of_work import EntityMapping
from src.service.ticketing.domain.entity.order_entity import Order, OrderItem
from src.service.ticketing.domain.entity.ticket_type_entity import TicketType
from src.service.ticketing.driven_adapter.model.order_model import OrderItemModel, OrderModel
from src.service.ticketing.driven_adapter.model.ticket_type_model import TicketTypeModel


def _ticket_type_row(ticket_type: TicketType) -> dict[str, Any]:
    return {
        'id': ticket_type.id,
        'name': ticket_type.name,
        'quantity': ticket_type.quantity,
        'available_quantity': ticket_type.available_quantity,
        'price': ticket_type.price,
    }


def _order_row(order: Order) -> dict[str, Any]:
    return {
        'id': order.id,
        'customer_id': order.customer_id,
        'created_at_utc': order.created_at_utc,
        'total_price': order.total_price,
        'currency': order.currency,
    }


def _order_item_row(item: OrderItem) -> dict[str, Any]:
    return {
        'id': item.id,
        'order_id': item.order_id,
        'ticket_type_id': item.ticket_type_id,
        'quantity': item.quantity,
        'price': item.price,
    }


def _order_items(order: Order) -> Sequence[OrderItem]:
    for item in order.order_items:
        item.order_id = order.id
    return order.order_items


TICKETING_ENTITY_MAPPINGS: dict[type, EntityMapping] = {
    TicketType: EntityMapping(
        table=TicketTypeModel.__table__,  # type: ignore[arg-type]
        to_row=_ticket_type_row,
        validate=TicketType.validate,
        # Only the adjustment procedure moves available_quantity
        immutable_columns=frozenset({'id', 'available_quantity'}),
    ),
    Order: EntityMapping(
        table=OrderModel.__table__,  # type: ignore[arg-type]
        to_row=_order_row,
        validate=Order.validate,
        children=_order_items,
        immutable_columns=frozenset({'id', 'created_at_utc'}),
        server_default_columns=frozenset({'created_at_utc'}),
        returning=('created_at_utc',),
    ),
    OrderItem: EntityMapping(
        table=OrderItemModel.__table__,  # type: ignore[arg-type]
        to_row=_order_item_row,
        validate=OrderItem.validate,
        immutable_columns=frozenset({'id', 'order_id'}),
    ),
}
