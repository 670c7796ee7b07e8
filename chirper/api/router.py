"""API 路由聚合"""

from fastapi import APIRouter

from chirper.modules.auth.router import router as auth_router
from chirper.modules.chirp.router import router as chirp_router
from chirper.modules.like.router import router as like_router
from chirper.modules.profile.router import router as profile_router
from chirper.schemas.response import ErrorResponse

# 所有接口共用的错误响应（OpenAPI 文档）
api_router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    }
)

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(profile_router, prefix="/profiles", tags=["profiles"])
api_router.include_router(chirp_router, prefix="/chirps", tags=["chirps"])
api_router.include_router(like_router, prefix="/likes", tags=["likes"])
