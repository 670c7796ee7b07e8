"""中间件配置"""

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from chirper.config import get_settings
from chirper.core.context import (
    RequestContext,
    get_request_context,
    set_request_context,
)
from chirper.core.security import extract_bearer_token, verify_access_token

settings = get_settings()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """请求上下文中间件：注入用户信息到 contextvars（仅用于日志，不做鉴权）"""

    async def dispatch(self, request: Request, call_next):
        profile_id = None
        token = extract_bearer_token(request.headers.get("Authorization"))
        if token:
            payload = verify_access_token(token)
            profile_id = payload.profile_id if payload else None

        ctx = RequestContext(
            profile_id=profile_id,
            ip_address=self._get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
            request_id=request.headers.get("X-Request-ID", uuid4().hex[:8]),
        )
        set_request_context(ctx)

        response = await call_next(request)
        response.headers["X-Request-ID"] = ctx.request_id
        return response

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """获取客户端真实 IP"""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求日志中间件（Loguru）"""

    async def dispatch(self, request: Request, call_next):
        ctx = get_request_context()
        if not ctx.request_id:
            ctx.request_id = uuid4().hex[:8]
            set_request_context(ctx)
        start_time = time.perf_counter()

        with logger.contextualize(request_id=ctx.request_id, profile_id=ctx.profile_id):
            logger.info(
                "{} {} from {} ({})",
                request.method,
                request.url.path,
                ctx.ip_address,
                ctx.user_agent or "-",
            )
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            logger.info("Completed {} in {:.3f}s", response.status_code, duration)

        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """安全响应头"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


def setup_middlewares(app: FastAPI) -> None:
    """注册中间件（注册顺序与执行顺序相反）"""
    # CORS（最内层）：未配置时开发模式放开 localhost
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    elif settings.debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"https?://localhost(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # GZip 压缩
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SecurityHeadersMiddleware)

    # 请求日志
    app.add_middleware(LoggingMiddleware)

    # 请求上下文（最外层，最先执行）
    app.add_middleware(RequestContextMiddleware)
