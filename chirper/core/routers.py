"""路由配置"""

from fastapi import FastAPI

from chirper.api.router import api_router

API_PREFIX = "/api"


def setup_routers(app: FastAPI) -> None:
    """注册路由"""
    app.include_router(api_router, prefix=API_PREFIX)
