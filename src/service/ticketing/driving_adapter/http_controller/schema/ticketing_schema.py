from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel


# Money and quantities are exact decimals internally but JSON numbers on the wire
JsonNumber = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used='json')]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SeedResponse(CamelModel):
    customer_id: UUID
    ticket_type_id: UUID

    class Config:
        json_schema_extra = {
            'example': {
                'customerId': '01928f4e-5c3a-7b1e-9a2d-3f4b5c6d7e8f',
                'ticketTypeId': '01928f4e-5c3a-7b1e-9a2d-000000000001',
            }
        }


class AvailableQuantityResponse(CamelModel):
    ticket_type_id: UUID
    available_quantity: int

    class Config:
        json_schema_extra = {
            'example': {
                'ticketTypeId': '01928f4e-5c3a-7b1e-9a2d-000000000001',
                'availableQuantity': 100,
            }
        }


class OrderSummaryResponse(CamelModel):
    order_id: UUID
    created_at_utc: datetime
    total_price: JsonNumber
    currency: str
    item_count: int

    class Config:
        json_schema_extra = {
            'example': {
                'orderId': '01928f4e-5c3a-7b1e-9a2d-3f4b5c6d7e90',
                'createdAtUtc': '2025-01-01T12:00:00Z',
                'totalPrice': 199.98,
                'currency': 'USD',
                'itemCount': 1,
            }
        }


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
