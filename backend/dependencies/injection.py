from fastapi import Request
from backend.services.order_registry import OrderRegistry


def get_order_registry(request: Request) -> OrderRegistry:
    """
    애플리케이션 시작 시 생성된 OrderRegistry 인스턴스를 반환합니다.
    """
    return request.app.state.order_registry
