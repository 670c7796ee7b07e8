"""
Chirper API

- create_app 工厂模式，便于测试
- setup_xxx 函数分离注册逻辑
- 三层架构：Router → Service → Repository
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from chirper import __version__
from chirper.config import get_settings
from chirper.core.database import close_database, init_database, utc_now
from chirper.core.exception_handlers import setup_exception_handlers
from chirper.core.logging import setup_logging
from chirper.core.middlewares import setup_middlewares
from chirper.core.routers import setup_routers
from chirper.schemas.response import ApiResponse

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # 启动时获取连接池
    await init_database()
    yield
    # 关闭时释放
    await close_database()


def create_app() -> FastAPI:
    """应用工厂函数"""
    setup_logging(settings.log_level, json_format=settings.log_json)

    application = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # 注册组件（顺序重要）
    setup_middlewares(application)
    setup_routers(application)
    setup_exception_handlers(application)

    @application.get("/health", response_model=ApiResponse[dict[str, str]])
    async def health_check() -> ApiResponse[dict[str, str]]:
        return ApiResponse(data={"status": "ok", "timestamp": utc_now().isoformat()})

    return application


app = create_app()
