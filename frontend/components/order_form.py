import asyncio
import logging
import math
from enum import Enum
from typing import Any, Callable, Dict, List
from backend.schemas.order import OrderSide, OrderType, PRICED_ORDER_TYPES, Symbol, price_rule_errors
from frontend.components.base import Component
from frontend.config import MESSAGE_TIMEOUT
from frontend.stores.order_store import OrderStore

logger = logging.getLogger(__name__)

FIELDS = ("symbol", "orderType", "quantity", "price", "stopPrice", "side")

FIELD_LABELS = {
    "symbol": "Symbol",
    "orderType": "Order Type",
    "quantity": "Quantity",
    "price": "Price",
    "stopPrice": "Stop Price",
    "side": "Side",
}

# 입력 편의를 위한 필드 이름 별칭
FIELD_ALIASES = {
    "order_type": "orderType",
    "type": "orderType",
    "qty": "quantity",
    "stop_price": "stopPrice",
    "stop": "stopPrice",
}

CHOICES = {
    "symbol": Symbol,
    "orderType": OrderType,
    "side": OrderSide,
}

DEFAULT_VALUES = {
    "symbol": Symbol.NIFTY.value,
    "orderType": OrderType.MARKET.value,
    "quantity": 1,
    "side": OrderSide.BUY.value,
}


class FormState(str, Enum):
    IDLE = "idle"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILURE = "failure"


SUCCESS_MESSAGE = "Order submitted successfully!"
FAILURE_MESSAGE = "Failed to submit order. Please try again."


def parse_number(value: Any) -> float | None:
    """입력값을 숫자로 변환합니다. 비어 있거나 숫자가 아니면 None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def canonical_choice(value: Any, choices: type[Enum]) -> Any:
    """대소문자와 무관하게 선택지 값과 일치하면 정식 값으로 바꿉니다. ('stop limit' -> 'Stop Limit')"""
    if not isinstance(value, str):
        return value
    for choice in choices:
        if choice.value.lower() == value.strip().lower():
            return choice.value
    return value.strip()


class OrderForm(Component):
    """
    주문 입력 폼.

    필드 값을 모으고 클라이언트 측 검증을 수행한 뒤 OrderStore.submit()에 위임합니다.
    성공하면 성공 메시지를 잠시 보여주고 기본값으로 초기화하며,
    실패하면 실패 메시지를 보여주고 입력값을 그대로 유지합니다.
    """

    def __init__(self, store: OrderStore, on_render: Callable[[str], None] | None = None,
                 message_timeout: float = MESSAGE_TIMEOUT):
        super().__init__(store, on_render)
        self.message_timeout = message_timeout
        self.values: Dict[str, Any] = dict(DEFAULT_VALUES)
        self.errors: Dict[str, str] = {}
        self.state = FormState.IDLE
        self.message: str | None = None
        self._message_handle: asyncio.TimerHandle | None = None

    # ------------------------------------------------------
    # 필드
    # ------------------------------------------------------
    def set_field(self, name: str, value: Any):
        name = FIELD_ALIASES.get(name, name)
        if name not in FIELDS:
            raise ValueError(f"Unknown field: {name}")
        if name in CHOICES:
            value = canonical_choice(value, CHOICES[name])
        self.values[name] = value
        self.errors.pop(name, None)
        self.refresh()

    def visible_fields(self) -> List[str]:
        """현재 주문 유형에서 화면에 보이는 필드 목록."""
        order_type = self.values.get("orderType")
        fields = ["symbol", "orderType", "quantity"]
        if order_type in (t.value for t in PRICED_ORDER_TYPES):
            fields.append("price")
        if order_type == OrderType.STOP_LIMIT.value:
            fields.append("stopPrice")
        fields.append("side")
        return fields

    def reset(self):
        self.values = dict(DEFAULT_VALUES)
        self.errors = {}

    # ------------------------------------------------------
    # 검증
    # ------------------------------------------------------
    def validate(self) -> Dict[str, str]:
        """
        보이는 필드만 검증합니다. 숨겨진 가격 필드의 값은 검사하지 않습니다.

        Returns:
            Dict[str, str]: {필드 이름: 오류 메시지}. 오류가 없으면 빈 dict.
        """
        values = self.values
        errors = {}

        symbol = values.get("symbol")
        if not symbol:
            errors["symbol"] = "Symbol is required"
        elif symbol not in (s.value for s in Symbol):
            errors["symbol"] = f"Unsupported symbol: {symbol}"

        order_type = values.get("orderType")
        if not order_type:
            errors["orderType"] = "Order type is required"
        elif order_type not in (t.value for t in OrderType):
            errors["orderType"] = f"Unsupported order type: {order_type}"

        quantity = parse_number(values.get("quantity"))
        if quantity is None:
            errors["quantity"] = "Quantity is required"
        elif quantity < 1:
            errors["quantity"] = "Quantity must be at least 1"
        elif not quantity.is_integer():
            errors["quantity"] = "Quantity must be a whole number"

        if "orderType" not in errors:
            visible = self.visible_fields()
            price = parse_number(values.get("price")) if "price" in visible else None
            stop_price = parse_number(values.get("stopPrice")) if "stopPrice" in visible else None
            errors.update(price_rule_errors(OrderType(order_type), price, stop_price))

        side = values.get("side")
        if not side or side not in (s.value for s in OrderSide):
            errors["side"] = "Please select Buy or Sell"

        return errors

    def payload(self) -> Dict[str, Any]:
        """보이는 필드만 담은 제출용 주문 데이터."""
        visible = self.visible_fields()
        data = {
            "symbol": self.values.get("symbol"),
            "orderType": self.values.get("orderType"),
            "quantity": int(parse_number(self.values.get("quantity"))),
            "side": self.values.get("side"),
        }
        if "price" in visible:
            data["price"] = parse_number(self.values.get("price"))
        if "stopPrice" in visible:
            data["stopPrice"] = parse_number(self.values.get("stopPrice"))
        return data

    # ------------------------------------------------------
    # 제출
    # ------------------------------------------------------
    @property
    def submit_enabled(self) -> bool:
        return not self.store.busy

    @property
    def submit_label(self) -> str:
        return "Submitting..." if self.store.busy else "Submit Order"

    async def submit(self) -> bool:
        """
        검증 후 주문을 제출합니다.

        Returns:
            bool: 제출 성공 여부. 검증 실패나 진행 중인 요청이 있으면 네트워크 호출 없이 False.
        """
        if not self.submit_enabled:
            return False

        self._set_message(None)
        self.errors = self.validate()
        if self.errors:
            self.state = FormState.INVALID
            logger.debug(f"Order form invalid: {self.errors}")
            self.refresh()
            return False

        self.state = FormState.SUBMITTING
        success = await self.store.submit(self.payload())
        if success:
            self.reset()
            self.state = FormState.SUCCESS
            self._set_message(SUCCESS_MESSAGE)
        else:
            self.state = FormState.FAILURE
            self._set_message(FAILURE_MESSAGE)
        return success

    def _set_message(self, message: str | None):
        if self._message_handle is not None:
            self._message_handle.cancel()
            self._message_handle = None
        self.message = message
        if message is not None:
            loop = asyncio.get_running_loop()
            self._message_handle = loop.call_later(self.message_timeout, self.clear_message)
        self.refresh()

    def clear_message(self):
        self._message_handle = None
        self.message = None
        if self.state in (FormState.SUCCESS, FormState.FAILURE):
            self.state = FormState.IDLE
        self.refresh()

    def unmount(self):
        if self._message_handle is not None:
            self._message_handle.cancel()
            self._message_handle = None
        super().unmount()

    # ------------------------------------------------------
    # 렌더링
    # ------------------------------------------------------
    def render(self) -> str:
        lines = ["Place Order", "-" * 40]
        if self.message:
            mark = "[OK]" if self.state == FormState.SUCCESS else "[!!]"
            lines.append(f"{mark} {self.message}")

        for name in self.visible_fields():
            value = self.values.get(name)
            shown = "" if value is None else str(value)
            line = f"  {FIELD_LABELS[name]:<11}: {shown}"
            if name in CHOICES:
                options = " | ".join(choice.value for choice in CHOICES[name])
                line = f"{line:<30} ({options})"
            lines.append(line)
            if name in self.errors:
                lines.append(f"      ! {self.errors[name]}")

        button = f"[ {self.submit_label} ]"
        if not self.submit_enabled:
            button += " (disabled)"
        lines.append(button)
        return "\n".join(lines)
