from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from src.platform.exception.exceptions import ConstraintError, NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.adjust_available_quantity_use_case import (
    AdjustAvailableQuantityUseCase,
)
from src.service.ticketing.app.command.seed_demo_data_use_case import SeedDemoDataUseCase
from src.service.ticketing.app.query.get_tickets_left_use_case import GetTicketsLeftUseCase
from src.service.ticketing.app.query.list_customer_order_summaries_use_case import (
    ListCustomerOrderSummariesUseCase,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticketing_schema import (
    AvailableQuantityResponse,
    ErrorResponse,
    MessageResponse,
    OrderSummaryResponse,
    SeedResponse,
)


ADJUST_SUCCESS_MESSAGE = 'Quantity adjusted successfully'

router = APIRouter()


@router.post('/seed', status_code=status.HTTP_200_OK)
@Logger.io
async def seed_demo_data(
    use_case: SeedDemoDataUseCase = Depends(SeedDemoDataUseCase.depends),
) -> SeedResponse:
    result = await use_case.seed()
    return SeedResponse(customer_id=result.customer_id, ticket_type_id=result.ticket_type_id)


@router.get('/ticket-types/{ticket_type_id}/available-quantity', status_code=status.HTTP_200_OK)
@Logger.io
async def get_available_quantity(
    ticket_type_id: UUID,
    use_case: GetTicketsLeftUseCase = Depends(GetTicketsLeftUseCase.depends),
) -> AvailableQuantityResponse:
    available_quantity = await use_case.get_tickets_left(ticket_type_id=ticket_type_id)
    return AvailableQuantityResponse(
        ticket_type_id=ticket_type_id, available_quantity=available_quantity
    )


@router.get('/customers/{customer_id}/order-summary', status_code=status.HTTP_200_OK)
@Logger.io
async def list_customer_order_summaries(
    customer_id: UUID,
    use_case: ListCustomerOrderSummariesUseCase = Depends(
        ListCustomerOrderSummariesUseCase.depends
    ),
) -> List[OrderSummaryResponse]:
    summaries = await use_case.list_by_customer(customer_id=customer_id)
    return [
        OrderSummaryResponse(
            order_id=summary.order_id,
            created_at_utc=summary.created_at_utc,
            total_price=summary.total_price,
            currency=summary.currency,
            item_count=summary.item_count,
        )
        for summary in summaries
    ]


@router.put(
    '/ticket-types/{ticket_type_id}/adjust-quantity',
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
    responses={status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse}},
)
@Logger.io
async def adjust_available_quantity(
    ticket_type_id: UUID,
    delta: int = Query(..., description='Signed change applied to available_quantity'),
    use_case: AdjustAvailableQuantityUseCase = Depends(AdjustAvailableQuantityUseCase.depends),
) -> MessageResponse | JSONResponse:
    try:
        await use_case.adjust(ticket_type_id=ticket_type_id, delta=delta)
    except (ConstraintError, NotFoundError, ValidationError) as e:
        # Connectivity and other storage failures fall through to the 5xx handlers
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=e.message).model_dump(),
        )
    return MessageResponse(message=ADJUST_SUCCESS_MESSAGE)
