"""
Unit tests for the ticketing HTTP controller

Use cases are replaced through FastAPI dependency overrides; the app runs
without its lifespan, so no database is touched.
"""

from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import UUID

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from src.platform.app_factory import create_app
from src.platform.exception.exceptions import (
    ConnectivityError,
    ConstraintError,
    NotFoundError,
    ValidationError,
)
from src.service.ticketing.app.command.adjust_available_quantity_use_case import (
    AdjustAvailableQuantityUseCase,
)
from src.service.ticketing.app.command.seed_demo_data_use_case import (
    SeedDemoDataUseCase,
    SeedResult,
)
from src.service.ticketing.app.dto.order_summary_dto import OrderSummary
from src.service.ticketing.app.query.get_tickets_left_use_case import GetTicketsLeftUseCase
from src.service.ticketing.app.query.list_customer_order_summaries_use_case import (
    ListCustomerOrderSummariesUseCase,
)


TICKET_TYPE_ID = UUID('01936d8f-5e73-7c4e-a9c5-123456789abc')
CUSTOMER_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')
ORDER_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000002')


@asynccontextmanager
async def _no_lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
def use_case() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def http(use_case: AsyncMock) -> Generator[TestClient, None, None]:
    app = create_app(lifespan=_no_lifespan, title_suffix=' (Unit)')
    for dependency in (
        SeedDemoDataUseCase.depends,
        GetTicketsLeftUseCase.depends,
        ListCustomerOrderSummariesUseCase.depends,
        AdjustAvailableQuantityUseCase.depends,
    ):
        app.dependency_overrides[dependency] = lambda: use_case
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.unit
class TestSeedEndpoint:
    def test_returns_camel_case_ids(self, http: TestClient, use_case: AsyncMock) -> None:
        use_case.seed.return_value = SeedResult(
            customer_id=CUSTOMER_ID, ticket_type_id=TICKET_TYPE_ID
        )

        response = http.post('/seed')

        assert response.status_code == 200
        assert response.json() == {
            'customerId': str(CUSTOMER_ID),
            'ticketTypeId': str(TICKET_TYPE_ID),
        }


@pytest.mark.unit
class TestAvailableQuantityEndpoint:
    def test_returns_quantity(self, http: TestClient, use_case: AsyncMock) -> None:
        use_case.get_tickets_left.return_value = 98

        response = http.get(f'/ticket-types/{TICKET_TYPE_ID}/available-quantity')

        assert response.status_code == 200
        assert response.json() == {'ticketTypeId': str(TICKET_TYPE_ID), 'availableQuantity': 98}
        use_case.get_tickets_left.assert_awaited_once_with(ticket_type_id=TICKET_TYPE_ID)

    def test_unknown_ticket_type_is_404(self, http: TestClient, use_case: AsyncMock) -> None:
        use_case.get_tickets_left.side_effect = NotFoundError('Ticket type not found')

        response = http.get(f'/ticket-types/{TICKET_TYPE_ID}/available-quantity')

        assert response.status_code == 404
        assert response.json() == {'detail': 'Ticket type not found'}

    def test_malformed_id_is_400(self, http: TestClient, use_case: AsyncMock) -> None:
        response = http.get("/ticket-types/1' OR '1'='1/available-quantity")

        assert response.status_code == 400
        use_case.get_tickets_left.assert_not_awaited()


@pytest.mark.unit
class TestOrderSummaryEndpoint:
    def test_returns_camel_case_summaries(self, http: TestClient, use_case: AsyncMock) -> None:
        use_case.list_by_customer.return_value = [
            OrderSummary(
                order_id=ORDER_ID,
                created_at_utc=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
                total_price=Decimal('199.98'),
                currency='USD',
                item_count=1,
            )
        ]

        response = http.get(f'/customers/{CUSTOMER_ID}/order-summary')

        assert response.status_code == 200
        [summary] = response.json()
        assert summary['orderId'] == str(ORDER_ID)
        assert summary['createdAtUtc'].startswith('2025-01-01T12:00:00')
        assert summary['totalPrice'] == 199.98
        assert summary['currency'] == 'USD'
        assert summary['itemCount'] == 1

    def test_no_orders_is_empty_list(self, http: TestClient, use_case: AsyncMock) -> None:
        use_case.list_by_customer.return_value = []

        response = http.get(f'/customers/{CUSTOMER_ID}/order-summary')

        assert response.status_code == 200
        assert response.json() == []


@pytest.mark.unit
class TestAdjustQuantityEndpoint:
    def test_success_message(self, http: TestClient, use_case: AsyncMock) -> None:
        response = http.put(f'/ticket-types/{TICKET_TYPE_ID}/adjust-quantity', params={'delta': -2})

        assert response.status_code == 200
        assert response.json() == {'message': 'Quantity adjusted successfully'}
        use_case.adjust.assert_awaited_once_with(ticket_type_id=TICKET_TYPE_ID, delta=-2)

    @pytest.mark.parametrize(
        'error',
        [
            ConstraintError('would leave available quantity outside 0..100'),
            NotFoundError('Ticket type not found'),
            ValidationError('Parameter delta must be a valid integer'),
        ],
    )
    def test_client_errors_are_400_with_message(
        self, http: TestClient, use_case: AsyncMock, error: Exception
    ) -> None:
        use_case.adjust.side_effect = error

        response = http.put(
            f'/ticket-types/{TICKET_TYPE_ID}/adjust-quantity', params={'delta': -101}
        )

        assert response.status_code == 400
        assert response.json() == {'error': str(error)}

    def test_connectivity_error_is_503_without_internals(
        self, http: TestClient, use_case: AsyncMock
    ) -> None:
        use_case.adjust.side_effect = ConnectivityError('could not connect to 10.0.0.5:5432')

        response = http.put(f'/ticket-types/{TICKET_TYPE_ID}/adjust-quantity', params={'delta': 1})

        assert response.status_code == 503
        assert response.json() == {'detail': 'Storage is temporarily unavailable'}

    def test_missing_delta_is_400(self, http: TestClient, use_case: AsyncMock) -> None:
        response = http.put(f'/ticket-types/{TICKET_TYPE_ID}/adjust-quantity')

        assert response.status_code == 400
        use_case.adjust.assert_not_awaited()


@pytest.mark.unit
class TestHealthEndpoint:
    def test_health(self, http: TestClient) -> None:
        response = http.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'
