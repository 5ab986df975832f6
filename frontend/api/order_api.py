import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict
import aiohttp
from frontend.config import API_TIMEOUT, ORDER_API_URL

logger = logging.getLogger(__name__)


class OrderApiError(Exception):
    """네트워크 오류 또는 응답 본문을 해석할 수 없는 경우 발생하는 예외."""


@dataclass
class ApiResponse:
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class OrderApiClient:
    """
    주문 서버 REST API(/api/order, /api/orders)와 통신하는 aiohttp 기반 비동기 클라이언트.

    하나의 ClientSession을 재사용하며, 사용 후 close() 하거나 async with 블록으로 사용합니다.
    """

    def __init__(self, api_url: str = ORDER_API_URL, timeout: float = API_TIMEOUT):
        self.api_url = api_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"accept": "application/json"},
            )
        return self._session

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(self, method: str, path: str, payload: dict | None = None) -> ApiResponse:
        """
        요청을 보내고 JSON 응답을 ApiResponse로 반환합니다.

        HTTP 오류 상태(4xx, 5xx)는 예외가 아니라 ApiResponse.status로 전달됩니다.

        Raises:
            OrderApiError: 연결 실패, 타임아웃, JSON 객체가 아닌 응답 본문.
        """
        url = f"{self.api_url}{path}"
        try:
            async with self._get_session().request(method, url, json=payload) as res:
                try:
                    body = await res.json(content_type=None)
                except ValueError as e:
                    raise OrderApiError(f"Malformed response from {method} {url} ({res.status})") from e
                status = res.status
        except aiohttp.ClientError as e:
            raise OrderApiError(f"Network error on {method} {url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise OrderApiError(f"Request timed out: {method} {url}") from e

        if not isinstance(body, dict):
            raise OrderApiError(f"Unexpected response body from {method} {url} ({status})")
        logger.debug(f"{method} {url} -> {status}")
        return ApiResponse(status=status, body=body)

    async def list_orders(self) -> ApiResponse:
        return await self._request("GET", "/api/orders")

    async def create_order(self, order_input: dict) -> ApiResponse:
        return await self._request("POST", "/api/order", order_input)

    async def clear_orders(self) -> ApiResponse:
        return await self._request("DELETE", "/api/orders")
