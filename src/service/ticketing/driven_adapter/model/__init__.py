"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.order_model import OrderItemModel, OrderModel
from src.service.ticketing.driven_adapter.model.ticket_type_model import TicketTypeModel

__all__ = [
    'OrderItemModel',
    'OrderModel',
    'TicketTypeModel',
]
