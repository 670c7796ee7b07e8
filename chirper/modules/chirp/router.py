"""Chirp 模块 - 路由"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from chirper.dependencies import CurrentProfile, OptionalProfile, require_json
from chirper.modules.like.dependencies import LikeServiceDep
from chirper.modules.like.schemas import LikeStats
from chirper.schemas.response import ApiPagedResponse, ApiResponse, Pagination
from .dependencies import ChirpServiceDep
from .schemas import ChirpCreate, ChirpFeedItem, ChirpUpdate

router = APIRouter()


def _viewer_id(viewer: OptionalProfile) -> UUID | None:
    return viewer.profile_id if viewer else None


@router.get("", response_model=ApiPagedResponse[ChirpFeedItem])
async def list_feed(
    viewer: OptionalProfile,
    service: ChirpServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ApiPagedResponse[ChirpFeedItem]:
    """信息流：全站 chirp 按时间倒序"""
    items = await service.feed(_viewer_id(viewer), limit, offset)
    return ApiPagedResponse(
        data=items,
        pagination=Pagination(limit=limit, offset=offset, count=len(items)),
    )


@router.post(
    "",
    response_model=ApiResponse[ChirpFeedItem],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_chirp(
    data: ChirpCreate,
    current: CurrentProfile,
    service: ChirpServiceDep,
) -> ApiResponse[ChirpFeedItem]:
    chirp = await service.create(current.profile_id, data)
    return ApiResponse(data=chirp, message="Chirp created successfully")


@router.get("/profile/{profile_id}", response_model=ApiPagedResponse[ChirpFeedItem])
async def list_profile_chirps(
    profile_id: UUID,
    viewer: OptionalProfile,
    service: ChirpServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ApiPagedResponse[ChirpFeedItem]:
    """某个用户发布的 chirp"""
    items = await service.feed(_viewer_id(viewer), limit, offset, profile_id=profile_id)
    return ApiPagedResponse(
        data=items,
        pagination=Pagination(limit=limit, offset=offset, count=len(items)),
    )


@router.get("/{chirp_id}", response_model=ApiResponse[ChirpFeedItem])
async def get_chirp(
    chirp_id: UUID,
    viewer: OptionalProfile,
    service: ChirpServiceDep,
) -> ApiResponse[ChirpFeedItem]:
    chirp = await service.get(chirp_id, _viewer_id(viewer))
    return ApiResponse(data=chirp)


@router.put(
    "/{chirp_id}",
    response_model=ApiResponse[ChirpFeedItem],
    dependencies=[Depends(require_json)],
)
async def update_chirp(
    chirp_id: UUID,
    data: ChirpUpdate,
    current: CurrentProfile,
    service: ChirpServiceDep,
) -> ApiResponse[ChirpFeedItem]:
    """修改 chirp（仅作者）"""
    chirp = await service.update(chirp_id, current.profile_id, data)
    return ApiResponse(data=chirp, message="Chirp updated successfully")


@router.delete("/{chirp_id}", response_model=ApiResponse[None])
async def delete_chirp(
    chirp_id: UUID,
    current: CurrentProfile,
    service: ChirpServiceDep,
) -> ApiResponse[None]:
    """删除 chirp（仅作者，点赞级联删除）"""
    await service.delete(chirp_id, current.profile_id)
    return ApiResponse(data=None, message="Chirp deleted successfully")


@router.get("/{chirp_id}/likes", response_model=ApiResponse[LikeStats])
async def get_chirp_likes(
    chirp_id: UUID,
    viewer: OptionalProfile,
    likes: LikeServiceDep,
) -> ApiResponse[LikeStats]:
    """点赞统计（同 GET /likes/chirp/{chirp_id}）"""
    stats = await likes.stats(chirp_id, _viewer_id(viewer))
    return ApiResponse(data=stats)
