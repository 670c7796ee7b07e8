"""点赞模块 - 路由"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from chirper.dependencies import CurrentProfile, OptionalProfile, require_json
from chirper.schemas.response import ApiPagedResponse, ApiResponse, Pagination
from .dependencies import LikeServiceDep
from .schemas import LikeResponse, LikeResult, LikeStats, LikeToggle

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[LikeResult],
    dependencies=[Depends(require_json)],
)
async def toggle_like(
    data: LikeToggle,
    current: CurrentProfile,
    service: LikeServiceDep,
) -> ApiResponse[LikeResult]:
    """点赞/取消点赞（切换）"""
    result = await service.toggle(current.profile_id, data.chirp_id)
    message = "Chirp liked successfully" if result.is_liked else "Chirp unliked successfully"
    return ApiResponse(data=result, message=message)


@router.delete("/{chirp_id}", response_model=ApiResponse[LikeResult])
async def unlike(
    chirp_id: UUID,
    current: CurrentProfile,
    service: LikeServiceDep,
) -> ApiResponse[LikeResult]:
    """取消点赞（幂等）"""
    result = await service.unlike(current.profile_id, chirp_id)
    return ApiResponse(data=result, message="Chirp unliked successfully")


@router.get("/chirp/{chirp_id}", response_model=ApiResponse[LikeStats])
async def get_like_stats(
    chirp_id: UUID,
    viewer: OptionalProfile,
    service: LikeServiceDep,
) -> ApiResponse[LikeStats]:
    stats = await service.stats(chirp_id, viewer.profile_id if viewer else None)
    return ApiResponse(data=stats)


@router.get("/chirp/{chirp_id}/users", response_model=ApiPagedResponse[LikeResponse])
async def list_chirp_likes(
    chirp_id: UUID,
    service: LikeServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ApiPagedResponse[LikeResponse]:
    """给某条 chirp 点过赞的记录"""
    items = await service.list_by_chirp(chirp_id, limit, offset)
    return ApiPagedResponse(
        data=items,
        pagination=Pagination(limit=limit, offset=offset, count=len(items)),
    )


@router.get("/profile/{profile_id}", response_model=ApiPagedResponse[LikeResponse])
async def list_profile_likes(
    profile_id: UUID,
    service: LikeServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ApiPagedResponse[LikeResponse]:
    items = await service.list_by_profile(profile_id, limit, offset)
    return ApiPagedResponse(
        data=items,
        pagination=Pagination(limit=limit, offset=offset, count=len(items)),
    )
