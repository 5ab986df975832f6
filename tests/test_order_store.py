import pytest
from backend.schemas.order import Order
from frontend.api.order_api import ApiResponse, OrderApiError
from conftest import created, make_order


def test_subscribe_notifies_synchronously(store):
    calls = []
    unsubscribe = store.subscribe(lambda: calls.append(len(store.orders)))

    store.append(Order.model_validate(make_order()))
    assert calls == [1]

    store.replace_all([Order.model_validate(make_order(id="a")), Order.model_validate(make_order(id="b"))])
    assert calls == [1, 2]

    store.clear_local()
    store.set_busy(True)
    assert calls == [1, 2, 0, 0]
    assert store.busy is True

    unsubscribe()
    unsubscribe()
    store.set_busy(False)
    assert len(calls) == 4


def test_subscription_context_releases_listener(store):
    calls = []
    with store.subscription(lambda: calls.append("x")):
        store.set_busy(True)
    store.set_busy(False)
    assert calls == ["x"]


def test_failing_listener_does_not_break_others(store):
    calls = []

    def broken():
        raise RuntimeError("render failed")

    store.subscribe(broken)
    store.subscribe(lambda: calls.append("ok"))
    store.set_busy(True)
    assert calls == ["ok"]


def test_orders_property_is_a_copy(store):
    store.append(Order.model_validate(make_order()))
    store.orders.clear()
    assert len(store.orders) == 1


@pytest.mark.asyncio
async def test_fetch_all_replaces_orders(store, api):
    store.append(Order.model_validate(make_order(id="stale")))
    busy_during_call = []

    async def list_orders():
        busy_during_call.append(store.busy)
        return ApiResponse(200, {"success": True, "orders": [make_order(id="a"), make_order(id="b")], "count": 2})

    api.list_orders.side_effect = list_orders

    assert await store.fetch_all() is True
    assert [o.id for o in store.orders] == ["a", "b"]
    assert busy_during_call == [True]
    assert store.busy is False


@pytest.mark.parametrize(
    "outcome",
    [
        OrderApiError("connection refused"),
        ApiResponse(500, {"success": False, "error": "Failed to fetch orders"}),
        ApiResponse(200, {"success": True, "orders": "not-a-list"}),
        ApiResponse(200, {"success": True, "orders": [{"id": "broken"}]}),
    ]
)
@pytest.mark.asyncio
async def test_fetch_all_failure_keeps_orders(store, api, outcome):
    store.append(Order.model_validate(make_order(id="kept")))
    if isinstance(outcome, Exception):
        api.list_orders.side_effect = outcome
    else:
        api.list_orders.return_value = outcome

    assert await store.fetch_all() is False
    assert [o.id for o in store.orders] == ["kept"]
    assert store.busy is False


@pytest.mark.asyncio
async def test_submit_appends_server_order(store, api):
    order_input = {"symbol": "NIFTY", "orderType": "Market", "quantity": 10, "side": "Buy"}
    api.create_order.return_value = created(order_input, order_id="order_1700000000001_zzzzzzzzz")
    busy_states = []
    store.subscribe(lambda: busy_states.append(store.busy))

    assert await store.submit(order_input) is True
    api.create_order.assert_awaited_once_with(order_input)
    assert [o.id for o in store.orders] == ["order_1700000000001_zzzzzzzzz"]
    assert store.orders[0].price is None
    assert busy_states == [True, True, False]


@pytest.mark.parametrize(
    "outcome",
    [
        OrderApiError("timeout"),
        ApiResponse(400, {"success": False, "error": "Missing required fields"}),
        ApiResponse(201, {"success": True}),
    ]
)
@pytest.mark.asyncio
async def test_submit_failure_does_not_mutate(store, api, outcome):
    if isinstance(outcome, Exception):
        api.create_order.side_effect = outcome
    else:
        api.create_order.return_value = outcome

    assert await store.submit({"symbol": "NIFTY"}) is False
    assert store.orders == []
    assert store.busy is False
    # 재시도하지 않음
    assert api.create_order.await_count == 1


@pytest.mark.asyncio
async def test_clear_all_empties_local_first(store, api):
    store.append(Order.model_validate(make_order()))
    seen = []

    async def clear_orders():
        seen.append(len(store.orders))
        return ApiResponse(200, {"success": True, "message": "Cleared 1 orders"})

    api.clear_orders.side_effect = clear_orders

    assert await store.clear_all() is True
    assert seen == [0]
    assert store.orders == []
    assert store.busy is False


@pytest.mark.asyncio
async def test_clear_all_server_failure_keeps_local_empty(store, api):
    store.append(Order.model_validate(make_order()))
    api.clear_orders.side_effect = OrderApiError("connection refused")

    assert await store.clear_all() is False
    assert store.orders == []
    assert store.busy is False
