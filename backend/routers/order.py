import logging
from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from backend.core.exceptions import InvalidOrderError, MissingFieldsError
from backend.dependencies.injection import get_order_registry
from backend.schemas.order import ClearOut, ErrorOut, OrderCreateOut, OrderListOut
from backend.services.order_registry import OrderRegistry

router = APIRouter()

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, details: dict[str, str] | None = None) -> JSONResponse:
    body = ErrorOut(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/order",
    response_model=OrderCreateOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    order_data: dict = Body(...),
    registry: OrderRegistry = Depends(get_order_registry),
):
    """
    새 주문을 생성합니다.

    Returns:
        OrderCreateOut: 서버가 id, timestamp를 부여한 주문

    Responses:
        400: 필수 필드 누락 또는 잘못된 필드 값
        500: 예기치 못한 서버 오류 (상세 내용은 서버 로그에만 기록)
    """
    try:
        order = registry.create(order_data)
    except MissingFieldsError as e:
        logger.warning(f"Order rejected, missing fields: {e.fields}")
        return error_response(status.HTTP_400_BAD_REQUEST, e.message)
    except InvalidOrderError as e:
        logger.warning(f"Order rejected, invalid fields: {e.details}")
        return error_response(status.HTTP_400_BAD_REQUEST, e.message, e.details)
    except Exception:
        logger.exception("Error creating order")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create order")

    logger.info(f"Order created: {order.id}")
    return OrderCreateOut(order=order)


@router.get("/orders", response_model=OrderListOut, response_model_exclude_none=True)
def get_orders(registry: OrderRegistry = Depends(get_order_registry)):
    try:
        orders, count = registry.list()
    except Exception:
        logger.exception("Error fetching orders")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch orders")

    logger.info(f"Fetching {count} orders")
    return OrderListOut(orders=orders, count=count)


@router.delete("/orders", response_model=ClearOut)
def clear_orders(registry: OrderRegistry = Depends(get_order_registry)):
    try:
        count = registry.clear()
    except Exception:
        logger.exception("Error clearing orders")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to clear orders")

    logger.info(f"Cleared {count} orders")
    return ClearOut(message=f"Cleared {count} orders")
