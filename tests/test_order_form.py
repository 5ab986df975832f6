import asyncio
import pytest
from frontend.api.order_api import ApiResponse, OrderApiError
from frontend.components.order_form import (
    DEFAULT_VALUES,
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    FormState,
    OrderForm,
    parse_number,
)
from conftest import created


@pytest.fixture
def form(store):
    return OrderForm(store, message_timeout=0.05)


def fill(form, **values):
    for name, value in values.items():
        form.set_field(name, value)


@pytest.mark.parametrize(
    "raw, expected",
    [("10", 10.0), (" 2,450.50 ", 2450.5), (7, 7.0), ("", None), ("abc", None), (None, None), (True, None), ("nan", None)],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_initial_values(form):
    assert form.values == DEFAULT_VALUES
    assert form.values["symbol"] == "NIFTY"
    assert form.values["orderType"] == "Market"
    assert form.values["side"] == "Buy"
    assert form.values["quantity"] == 1
    assert form.validate() == {}


def test_conditional_visibility(form):
    assert "price" not in form.visible_fields()
    assert "stopPrice" not in form.visible_fields()

    form.set_field("orderType", "Limit")
    assert "price" in form.visible_fields()
    assert "stopPrice" not in form.visible_fields()

    form.set_field("orderType", "stop limit")
    assert form.values["orderType"] == "Stop Limit"
    assert form.visible_fields() == ["symbol", "orderType", "quantity", "price", "stopPrice", "side"]


def test_unknown_field(form):
    with pytest.raises(ValueError, match="Unknown field"):
        form.set_field("account", "x")


def test_field_aliases(form):
    fill(form, type="Limit", qty="3", stop_price="90")
    assert form.values["orderType"] == "Limit"
    assert form.values["quantity"] == "3"
    assert form.values["stopPrice"] == "90"


def test_market_order_valid_without_prices(form):
    fill(form, symbol="TCS", quantity="10")
    assert form.validate() == {}
    assert form.payload() == {"symbol": "TCS", "orderType": "Market", "quantity": 10, "side": "Buy"}


@pytest.mark.parametrize("price", [None, "", "0", "-1", "abc"])
def test_limit_order_requires_positive_price(form, price):
    fill(form, orderType="Limit", price=price)
    assert "price" in form.validate()


@pytest.mark.parametrize(
    "price, stop_price, fields",
    [
        (None, None, {"price", "stopPrice"}),
        ("100", None, {"stopPrice"}),
        ("100", "0", {"stopPrice"}),
        ("-5", "90", {"price"}),
    ],
)
def test_stop_limit_requires_both_prices(form, price, stop_price, fields):
    fill(form, orderType="Stop Limit", price=price, stopPrice=stop_price)
    assert set(form.validate()) == fields


@pytest.mark.parametrize(
    "quantity, message",
    [("", "Quantity is required"), ("0", "Quantity must be at least 1"), ("1.5", "Quantity must be a whole number")],
)
def test_quantity_rules(form, quantity, message):
    form.set_field("quantity", quantity)
    assert form.validate()["quantity"] == message


def test_required_choices(form):
    fill(form, symbol="", orderType="", side="")
    errors = form.validate()
    assert errors["symbol"] == "Symbol is required"
    assert errors["orderType"] == "Order type is required"
    assert errors["side"] == "Please select Buy or Sell"


def test_unsupported_symbol(form):
    form.set_field("symbol", "AAPL")
    assert "symbol" in form.validate()


def test_hidden_fields_are_not_validated_or_sent(form):
    fill(form, orderType="Stop Limit", price="abc", stopPrice="-1")
    assert set(form.validate()) == {"price", "stopPrice"}

    form.set_field("orderType", "Market")
    assert form.validate() == {}
    assert "price" not in form.payload()
    assert "stopPrice" not in form.payload()


@pytest.mark.asyncio
async def test_limit_without_price_blocks_submission(form, api):
    fill(form, symbol="TCS", orderType="Limit", quantity="5", side="Sell")

    assert await form.submit() is False
    assert form.state == FormState.INVALID
    assert form.errors["price"] == "Price is required for Limit and Stop Limit orders"
    api.create_order.assert_not_called()
    assert "Price is required" in form.render()


@pytest.mark.asyncio
async def test_successful_submit_resets_and_clears_message(form, store, api):
    order_input = {"symbol": "RELIANCE", "orderType": "Stop Limit", "quantity": 15,
                   "price": 2450.0, "stopPrice": 2400.0, "side": "Buy"}
    api.create_order.return_value = created(order_input)
    fill(form, symbol="RELIANCE", orderType="Stop Limit", quantity="15", price="2450", stopPrice="2400", side="Buy")

    assert await form.submit() is True
    api.create_order.assert_awaited_once_with(order_input)
    assert form.state == FormState.SUCCESS
    assert form.message == SUCCESS_MESSAGE
    assert form.values == DEFAULT_VALUES
    assert len(store.orders) == 1

    await asyncio.sleep(0.1)
    assert form.message is None
    assert form.state == FormState.IDLE


@pytest.mark.asyncio
async def test_failed_submit_keeps_values(form, store, api):
    api.create_order.return_value = ApiResponse(500, {"success": False, "error": "Failed to create order"})
    fill(form, symbol="BANKNIFTY", quantity="4", side="Sell")

    assert await form.submit() is False
    assert form.state == FormState.FAILURE
    assert form.message == FAILURE_MESSAGE
    assert form.values["symbol"] == "BANKNIFTY"
    assert form.values["quantity"] == "4"
    assert store.orders == []

    await asyncio.sleep(0.1)
    assert form.message is None


@pytest.mark.asyncio
async def test_network_failure_surfaces_once(form, api):
    api.create_order.side_effect = OrderApiError("connection refused")

    assert await form.submit() is False
    assert form.message == FAILURE_MESSAGE
    assert api.create_order.await_count == 1


@pytest.mark.asyncio
async def test_submit_control_disabled_while_busy(form, store, api):
    seen = {}

    async def create_order(order_input):
        seen["label"] = form.submit_label
        seen["enabled"] = form.submit_enabled
        seen["render"] = form.render()
        seen["second"] = await form.submit()
        return created(order_input)

    api.create_order.side_effect = create_order

    assert await form.submit() is True
    assert seen["label"] == "Submitting..."
    assert seen["enabled"] is False
    assert "(disabled)" in seen["render"]
    assert seen["second"] is False
    assert api.create_order.await_count == 1
    assert form.submit_label == "Submit Order"


@pytest.mark.asyncio
async def test_form_rerenders_on_store_changes(store, api):
    frames = []
    api.create_order.return_value = created({"symbol": "NIFTY", "orderType": "Market", "quantity": 1, "side": "Buy"})

    with OrderForm(store, on_render=frames.append, message_timeout=0.05) as form:
        assert len(frames) == 1
        await form.submit()
        assert any("Submitting..." in frame for frame in frames)
        assert SUCCESS_MESSAGE in frames[-1]

    count = len(frames)
    store.set_busy(True)
    assert len(frames) == count
