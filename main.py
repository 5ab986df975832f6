import importlib
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from backend.core.config import DEV, HOST, PORT, APP_ENV
from backend.services.order_registry import OrderRegistry
from backend.utils.log_config import setup_logging

# YAML 파일 경로
LOGGING_CONFIG_PATH = Path(__file__).resolve().parent / "app_logging_config.yaml"

# 로깅 설정 초기화
setup_logging(LOGGING_CONFIG_PATH, debug=DEV)

# 로거 생성
logger = logging.getLogger(__name__)
access_logger = logging.getLogger(f"{__name__}.access")

ROUTERS_DIR = Path(__file__).resolve().parent / "backend" / "routers"


# Lifespan 이벤트 핸들러 정의
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    애플리케이션 시작/종료 시점의 로그를 남깁니다.

    Args:
        _app (FastAPI): FastAPI 애플리케이션 인스턴스.

    Yields:
        None: 애플리케이션 실행 중에 lifespan 이벤트를 처리합니다.
    """
    logger.info("=" * 60)
    logger.info("Server is ready!")
    logger.info(f"Local:        http://{HOST}:{PORT}")
    logger.info(f"Environment:  {APP_ENV}")
    logger.info("API Endpoints:")
    logger.info("  POST   /api/order   - Create new order")
    logger.info("  GET    /api/orders  - Get all orders")
    logger.info("  DELETE /api/orders  - Clear all orders")
    logger.info("=" * 60)
    try:
        yield  # 애플리케이션 실행 중
    finally:
        logger.info("애플리케이션 종료")


async def log_requests(request: Request, call_next):
    access_logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


async def invalid_body_handler(request: Request, exc: RequestValidationError):
    """
    JSON 객체가 아닌 요청 본문은 400과 일반 오류 메시지로 응답합니다.
    """
    logger.warning(f"Invalid request body for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request body"})


def create_app(registry: OrderRegistry | None = None) -> FastAPI:
    """
    FastAPI 애플리케이션을 생성합니다.

    Args:
        registry (OrderRegistry | None): 주입할 주문 저장소. 없으면 새로 생성합니다.

    Returns:
        FastAPI: 주문 API 라우터가 등록된 애플리케이션.
    """
    app = FastAPI(lifespan=lifespan)
    # 주문 저장소는 프로세스당 한 번 생성되어 핸들러에 주입됨
    app.state.order_registry = registry if registry is not None else OrderRegistry()

    app.middleware("http")(log_requests)
    app.add_exception_handler(RequestValidationError, invalid_body_handler)

    # API 라우터 등록
    # routers 디렉토리에서 모든 라우터 파일을 자동으로 로드
    for path in sorted(ROUTERS_DIR.glob("*.py")):
        if path.name == "__init__.py":
            continue
        module = importlib.import_module(f"backend.routers.{path.stem}")
        app.include_router(module.router, prefix="/api")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=DEV)
