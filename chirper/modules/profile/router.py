"""资料模块 - 路由"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path

from chirper.dependencies import CurrentProfile, require_json
from chirper.schemas.response import ApiResponse
from .dependencies import ProfileServiceDep
from .schemas import ProfilePublic, ProfileResponse, ProfileUpdate

router = APIRouter()


@router.get("/me", response_model=ApiResponse[ProfileResponse])
async def get_my_profile(
    current: CurrentProfile,
    service: ProfileServiceDep,
) -> ApiResponse[ProfileResponse]:
    """获取当前用户资料"""
    profile = await service.get_me(current.profile_id)
    return ApiResponse(data=profile)


@router.put(
    "/me",
    response_model=ApiResponse[ProfileResponse],
    dependencies=[Depends(require_json)],
)
async def update_my_profile(
    data: ProfileUpdate,
    current: CurrentProfile,
    service: ProfileServiceDep,
) -> ApiResponse[ProfileResponse]:
    """更新当前用户资料"""
    profile = await service.update_me(current.profile_id, data)
    return ApiResponse(data=profile, message="Profile updated successfully")


@router.get("/username/{username}", response_model=ApiResponse[ProfilePublic])
async def get_profile_by_username(
    service: ProfileServiceDep,
    username: str = Path(min_length=3),
) -> ApiResponse[ProfilePublic]:
    """按用户名获取公开资料"""
    profile = await service.get_public_by_username(username)
    return ApiResponse(data=profile)


@router.get("/{profile_id}", response_model=ApiResponse[ProfilePublic])
async def get_profile(
    profile_id: UUID,
    service: ProfileServiceDep,
) -> ApiResponse[ProfilePublic]:
    """按 id 获取公开资料"""
    profile = await service.get_public(profile_id)
    return ApiResponse(data=profile)
