import logging
import secrets
import string
import threading
import time
from datetime import datetime, timezone
from typing import Callable, List, Tuple
from pydantic import ValidationError
from backend.core.exceptions import InvalidOrderError, MissingFieldsError
from backend.schemas.order import Order, OrderIn, price_rule_errors

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("symbol", "orderType", "quantity", "side")

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_SUFFIX_LENGTH = 9


def generate_order_id() -> str:
    """
    주문 ID를 생성합니다. 형식: order_<epoch ms>_<base36 9자리>

    같은 밀리초 안에서의 충돌 검사는 하지 않습니다.
    """
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"order_{time.time_ns() // 1_000_000}_{suffix}"


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 (밀리초, Z 접미사) 문자열로 변환합니다."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_order_input(order_input: dict) -> OrderIn:
    """
    요청 본문을 OrderIn으로 변환하고 가격 조건을 검사합니다.

    Raises:
        InvalidOrderError: 값의 종류/범위가 잘못되었거나 가격 조건을 만족하지 않을 경우.
    """
    try:
        order_in = OrderIn.model_validate(order_input)
    except ValidationError as e:
        details = {}
        for err in e.errors():
            field = ".".join(str(loc) for loc in err["loc"]) or "order"
            details.setdefault(field, err["msg"])
        raise InvalidOrderError(details) from e

    errors = price_rule_errors(order_in.order_type, order_in.price, order_in.stop_price)
    if errors:
        raise InvalidOrderError(errors)
    return order_in


class OrderRegistry:
    """
    프로세스 메모리에 보관되는 주문 목록.

    애플리케이션 시작 시 한 번 생성되어 라우터에 주입됩니다.
    동기 엔드포인트는 스레드풀에서 실행되므로 모든 연산은 lock 안에서 수행합니다.
    """

    def __init__(self, id_factory: Callable[[], str] = generate_order_id,
                 clock: Callable[[], datetime] | None = None):
        self._orders: List[Order] = []
        self._lock = threading.Lock()
        self._id_factory = id_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_created_at: datetime | None = None

    def create(self, order_input: dict) -> Order:
        """
        주문을 검증하고 id, timestamp를 부여한 뒤 목록 끝에 추가합니다.

        Args:
            order_input (dict): 클라이언트가 보낸 주문 데이터 (id, timestamp는 무시됨)

        Returns:
            Order: 저장된 주문

        Raises:
            MissingFieldsError: symbol, orderType, quantity, side 중 하나라도 없을 경우.
            InvalidOrderError: 필드 값이 잘못되었을 경우.
        """
        missing = [field for field in REQUIRED_FIELDS if not order_input.get(field)]
        if missing:
            raise MissingFieldsError(missing)

        order_in = parse_order_input(order_input)

        with self._lock:
            created_at = self._clock()
            # 시스템 시계가 뒤로 가더라도 timestamp는 감소하지 않음
            if self._last_created_at is not None and created_at < self._last_created_at:
                created_at = self._last_created_at
            self._last_created_at = created_at

            order = Order(
                id=self._id_factory(),
                timestamp=format_timestamp(created_at),
                **order_in.model_dump(),
            )
            self._orders.append(order)
        logger.debug("Stored order %s (%d total)", order.id, len(self._orders))
        return order

    def list(self) -> Tuple[List[Order], int]:
        with self._lock:
            orders = list(self._orders)
        return orders, len(orders)

    def clear(self) -> int:
        with self._lock:
            count = len(self._orders)
            self._orders = []
        return count
