import pytest
from unittest.mock import AsyncMock
from frontend.api.order_api import ApiResponse, OrderApiClient
from frontend.stores.order_store import OrderStore


def make_order(**overrides) -> dict:
    order = {
        "id": "order_1700000000000_abc123xyz",
        "symbol": "NIFTY",
        "orderType": "Market",
        "quantity": 10,
        "side": "Buy",
        "timestamp": "2024-01-01T09:15:00.000Z",
    }
    order.update(overrides)
    return order


def created(order_input: dict, order_id: str = "order_1700000000000_abc123xyz") -> ApiResponse:
    order = make_order(id=order_id, **order_input)
    return ApiResponse(status=201, body={"success": True, "order": order})


@pytest.fixture
def api():
    return AsyncMock(spec=OrderApiClient)


@pytest.fixture
def store(api):
    return OrderStore(api)
