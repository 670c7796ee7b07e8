"""认证模块 - 路由"""

from fastapi import APIRouter, Depends, status

from chirper.dependencies import require_json
from chirper.schemas.response import ApiResponse
from .dependencies import AuthServiceDep
from .schemas import AuthResponse, LoginRequest, RefreshRequest, RefreshResponse, RegisterRequest

router = APIRouter(dependencies=[Depends(require_json)])


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(data: RegisterRequest, service: AuthServiceDep) -> ApiResponse[AuthResponse]:
    """注册并直接登录"""
    result = await service.register(data)
    return ApiResponse(data=result, message="Account created successfully")


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login(data: LoginRequest, service: AuthServiceDep) -> ApiResponse[AuthResponse]:
    result = await service.login(data)
    return ApiResponse(data=result, message="Login successful")


@router.post("/refresh", response_model=ApiResponse[RefreshResponse])
async def refresh(data: RefreshRequest, service: AuthServiceDep) -> ApiResponse[RefreshResponse]:
    """刷新访问令牌"""
    result = await service.refresh(data)
    return ApiResponse(data=result, message="Token refreshed successfully")
