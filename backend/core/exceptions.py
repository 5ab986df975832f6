class OrderError(Exception):
    """
    주문 처리 중 발생하는 도메인 예외의 기본 클래스.
    """
    message = "Invalid order"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class MissingFieldsError(OrderError):
    """필수 필드(symbol, orderType, quantity, side)가 누락된 경우."""
    message = "Missing required fields"

    def __init__(self, fields: list[str]):
        super().__init__()
        self.fields = fields


class InvalidOrderError(OrderError):
    """필드 값의 범위/종류가 잘못되었거나 가격 조건을 만족하지 않는 경우."""
    message = "Invalid order"

    def __init__(self, details: dict[str, str]):
        super().__init__()
        self.details = details
