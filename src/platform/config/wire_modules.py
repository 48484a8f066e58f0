"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import adjust_available_quantity_use_case
from src.service.ticketing.app.query import (
    get_tickets_left_use_case,
    list_customer_order_summaries_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    adjust_available_quantity_use_case,
    get_tickets_left_use_case,
    list_customer_order_summaries_use_case,
]
