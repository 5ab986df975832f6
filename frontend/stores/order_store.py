import logging
from contextlib import contextmanager
from typing import Any, Callable, List
from pydantic import ValidationError
from backend.schemas.order import Order
from frontend.api.order_api import OrderApiClient, OrderApiError

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class OrderStore:
    """
    클라이언트 측 주문 상태 저장소.

    서버에서 가져오거나 제출한 주문 목록(orders)과 네트워크 요청 진행 여부(busy)를 보관합니다.
    상태가 바뀌면 subscribe()로 등록된 리스너를 등록 순서대로 즉시(동기) 호출합니다.
    """

    def __init__(self, api: OrderApiClient):
        self.api = api
        self._orders: List[Order] = []
        self._busy = False
        self._listeners: List[Listener] = []

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def busy(self) -> bool:
        return self._busy

    # ------------------------------------------------------
    # 구독
    # ------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        상태 변경 리스너를 등록합니다.

        Returns:
            Callable[[], None]: 호출하면 등록을 해제하는 함수 (여러 번 호출해도 안전)
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def subscription(self, listener: Listener):
        unsubscribe = self.subscribe(listener)
        try:
            yield self
        finally:
            unsubscribe()

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"Order store listener failed: {listener!r}")

    # ------------------------------------------------------
    # 상태 변경
    # ------------------------------------------------------
    def append(self, order: Order):
        self._orders.append(order)
        self._notify()

    def replace_all(self, orders: List[Order]):
        self._orders = list(orders)
        self._notify()

    def clear_local(self):
        self._orders = []
        self._notify()

    def set_busy(self, busy: bool):
        self._busy = busy
        self._notify()

    @contextmanager
    def _busy_scope(self):
        self.set_busy(True)
        try:
            yield
        finally:
            self.set_busy(False)

    # ------------------------------------------------------
    # 서버 동기화
    # ------------------------------------------------------
    async def fetch_all(self) -> bool:
        """
        서버의 전체 주문 목록으로 로컬 목록을 교체합니다.

        실패(네트워크 오류, 응답 해석 실패, 성공이 아닌 상태 코드) 시 로컬 목록은 그대로 두고 로그만 남깁니다.
        """
        with self._busy_scope():
            try:
                res = await self.api.list_orders()
                if not res.ok:
                    logger.warning(f"Failed to fetch orders: HTTP {res.status} {res.body.get('error')}")
                    return False
                orders = _parse_orders(res.body.get("orders"))
            except (OrderApiError, ValidationError) as e:
                logger.error(f"Failed to fetch orders: {e}")
                return False
            self.replace_all(orders)
            return True

    async def submit(self, order_input: dict) -> bool:
        """
        주문을 서버에 제출하고, 성공하면 서버가 반환한 주문을 로컬 목록 끝에 추가합니다.

        Args:
            order_input (dict): symbol, orderType, quantity, side, price?, stopPrice?

        Returns:
            bool: 성공 여부. 실패 시 로컬 목록은 변경되지 않으며 재시도하지 않습니다.
        """
        with self._busy_scope():
            try:
                res = await self.api.create_order(order_input)
                if not res.ok:
                    logger.warning(f"Order rejected: HTTP {res.status} {res.body.get('error')}")
                    return False
                order = Order.model_validate(res.body.get("order"))
            except (OrderApiError, ValidationError) as e:
                logger.error(f"Failed to submit order: {e}")
                return False
            self.append(order)
            return True

    async def clear_all(self) -> bool:
        """
        로컬 목록을 즉시 비운 뒤 서버 주문 목록도 삭제(DELETE /api/orders)합니다.

        서버 삭제에 실패해도 로컬 목록은 빈 상태로 남습니다.
        """
        self.clear_local()
        with self._busy_scope():
            try:
                res = await self.api.clear_orders()
            except OrderApiError as e:
                logger.error(f"Failed to clear orders: {e}")
                return False
            if not res.ok:
                logger.warning(f"Failed to clear orders: HTTP {res.status} {res.body.get('error')}")
                return False
            logger.info(res.body.get("message", "Cleared orders"))
            return True


def _parse_orders(raw: Any) -> List[Order]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise OrderApiError(f"Expected a list of orders, got {type(raw).__name__}")
    return [Order.model_validate(item) for item in raw]
