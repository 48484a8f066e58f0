"""Application layer DTOs"""

from src.service.ticketing.app.dto.order_summary_dto import OrderSummary

__all__ = [
    'OrderSummary',
]
