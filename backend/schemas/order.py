from enum import Enum
from typing import Any, List
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Symbol(str, Enum):
    NIFTY = "NIFTY"
    BANKNIFTY = "BANKNIFTY"
    RELIANCE = "RELIANCE"
    TCS = "TCS"


class OrderType(str, Enum):
    MARKET = "Market"
    LIMIT = "Limit"
    STOP_LIMIT = "Stop Limit"


class OrderSide(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


# 가격(price)이 필요한 주문 유형
PRICED_ORDER_TYPES = (OrderType.LIMIT, OrderType.STOP_LIMIT)


def price_rule_errors(order_type: OrderType | None, price: float | None, stop_price: float | None) -> dict[str, str]:
    """
    주문 유형별 가격 조건을 검사합니다.

    - Limit, Stop Limit: price 필수, 0보다 커야 함
    - Stop Limit: stopPrice 필수, 0보다 커야 함

    Args:
        order_type (OrderType | None): 주문 유형
        price (float | None): 지정가
        stop_price (float | None): 스탑 가격

    Returns:
        dict[str, str]: {필드 이름(camelCase): 오류 메시지}. 조건을 모두 만족하면 빈 dict.
    """
    errors = {}
    if order_type in PRICED_ORDER_TYPES:
        if price is None:
            errors["price"] = "Price is required for Limit and Stop Limit orders"
        elif price <= 0:
            errors["price"] = "Price must be greater than 0"
    if order_type == OrderType.STOP_LIMIT:
        if stop_price is None:
            errors["stopPrice"] = "Stop Price is required for Stop Limit orders"
        elif stop_price <= 0:
            errors["stopPrice"] = "Stop Price must be greater than 0"
    return errors


class CamelModel(BaseModel):
    # JSON은 camelCase(orderType, stopPrice), 파이썬 속성은 snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderIn(CamelModel):
    symbol: Symbol
    order_type: OrderType
    # strict: true/1.0 같은 값을 정수로 바꾸지 않음
    quantity: int = Field(..., ge=1, strict=True)
    side: OrderSide
    # 1e400 같은 JSON 숫자는 inf가 되므로 유한한 값만 허용
    price: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    stop_price: float | None = Field(default=None, gt=0, allow_inf_nan=False)

    @model_validator(mode="before")
    @classmethod
    def drop_unused_prices(cls, data: Any) -> Any:
        """주문 유형에 쓰이지 않는 가격 필드는 검증 전에 제거합니다."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        order_type = data.get("orderType", data.get("order_type"))
        unused = []
        if order_type == OrderType.MARKET.value:
            unused = ["price", "stopPrice", "stop_price"]
        elif order_type == OrderType.LIMIT.value:
            unused = ["stopPrice", "stop_price"]
        for key in unused:
            data.pop(key, None)
        return data


class Order(OrderIn):
    id: str
    timestamp: str


class OrderCreateOut(CamelModel):
    success: bool = True
    order: Order


class OrderListOut(CamelModel):
    success: bool = True
    orders: List[Order]
    count: int


class ClearOut(CamelModel):
    success: bool = True
    message: str


class ErrorOut(CamelModel):
    success: bool = False
    error: str
    details: dict[str, str] | None = None
