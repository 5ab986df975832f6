from datetime import datetime
from typing import Callable, List, Tuple
from backend.schemas.order import Order, OrderSide
from frontend.components.base import Component
from frontend.stores.order_store import OrderStore

HEADERS = ("Symbol", "Order Type", "Quantity", "Price", "Stop Price", "Side", "Time")
SIDE_COLUMN = HEADERS.index("Side")

TITLE = "Order Summary"
LOADING_MESSAGE = "Loading orders..."
EMPTY_MESSAGE = "No orders yet. Submit your first order above!"
NOT_AVAILABLE = "N/A"

GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"


def format_price(price: float | None) -> str:
    return NOT_AVAILABLE if price is None else f"₹{price:,.2f}"


def format_timestamp(timestamp: str) -> str:
    """ISO-8601 timestamp를 로컬 시간 'YYYY-MM-DD HH:MM:SS'로 변환합니다. 해석할 수 없으면 원문 그대로."""
    try:
        dt = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return str(timestamp)
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def order_row(order: Order) -> Tuple[str, ...]:
    return (
        order.symbol.value,
        order.order_type.value,
        str(order.quantity),
        format_price(order.price),
        format_price(order.stop_price),
        order.side.value,
        format_timestamp(order.timestamp),
    )


class OrderTable(Component):
    """
    OrderStore의 주문 목록을 표로 보여주는 컴포넌트.

    자체 상태 없이 store.orders, store.busy만 읽어서 렌더링합니다.
    """

    def __init__(self, store: OrderStore, on_render: Callable[[str], None] | None = None,
                 color: bool = False):
        super().__init__(store, on_render)
        self.color = color

    def rows(self) -> List[Tuple[str, ...]]:
        return [order_row(order) for order in self.store.orders]

    def _side_cell(self, text: str, width: int) -> str:
        padded = text.ljust(width)
        if not self.color:
            return padded
        color = GREEN if text == OrderSide.BUY.value else RED
        return f"{color}{padded}{RESET}"

    def render(self) -> str:
        if self.store.busy:
            return f"{TITLE}\n{LOADING_MESSAGE}"

        rows = self.rows()
        if not rows:
            return f"{TITLE}\n{EMPTY_MESSAGE}"

        widths = [len(header) for header in HEADERS]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        lines = [f"{TITLE}    Total Orders: {len(rows)}"]
        lines.append("  ".join(header.ljust(widths[i]) for i, header in enumerate(HEADERS)).rstrip())
        lines.append("  ".join("-" * width for width in widths))
        for row in rows:
            cells = []
            for i, cell in enumerate(row):
                if i == SIDE_COLUMN:
                    cells.append(self._side_cell(cell, widths[i]))
                else:
                    cells.append(cell.ljust(widths[i]))
            lines.append("  ".join(cells).rstrip())
        return "\n".join(lines)

    async def clear(self) -> bool:
        """주문 전체 삭제. 화면의 목록은 호출 즉시 비워집니다."""
        return await self.store.clear_all()
