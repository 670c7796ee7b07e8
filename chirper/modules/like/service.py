"""点赞模块 - 业务逻辑层"""

from uuid import UUID

from loguru import logger

from chirper.modules.chirp.exceptions import ChirpNotFoundError
from chirper.modules.chirp.repository import ChirpRepository
from .repository import LikeRepository
from .schemas import LikeResponse, LikeResult, LikeStats


class LikeService:
    def __init__(self, repository: LikeRepository, chirps: ChirpRepository) -> None:
        self.repository = repository
        self.chirps = chirps

    async def _ensure_chirp(self, chirp_id: UUID) -> None:
        if not await self.chirps.exists(chirp_id):
            raise ChirpNotFoundError(chirp_id)

    async def toggle(self, profile_id: UUID, chirp_id: UUID) -> LikeResult:
        """点赞/取消点赞：服务端无条件翻转，不接受目标状态"""
        await self._ensure_chirp(chirp_id)
        is_liked = await self.repository.toggle(profile_id, chirp_id)
        logger.info("Chirp {} {} by {}", chirp_id, "liked" if is_liked else "unliked", profile_id)
        return LikeResult(like_count=await self.repository.count(chirp_id), is_liked=is_liked)

    async def unlike(self, profile_id: UUID, chirp_id: UUID) -> LikeResult:
        """取消点赞（幂等）"""
        await self._ensure_chirp(chirp_id)
        await self.repository.delete(profile_id, chirp_id)
        return LikeResult(like_count=await self.repository.count(chirp_id), is_liked=False)

    async def stats(self, chirp_id: UUID, viewer_id: UUID | None) -> LikeStats:
        return LikeStats(
            chirp_id=chirp_id,
            like_count=await self.repository.count(chirp_id),
            is_liked=await self.repository.is_liked(chirp_id, viewer_id),
        )

    async def list_by_chirp(self, chirp_id: UUID, limit: int, offset: int) -> list[LikeResponse]:
        likes = await self.repository.list_by_chirp(chirp_id, limit, offset)
        return [LikeResponse.model_validate(like) for like in likes]

    async def list_by_profile(self, profile_id: UUID, limit: int, offset: int) -> list[LikeResponse]:
        likes = await self.repository.list_by_profile(profile_id, limit, offset)
        return [LikeResponse.model_validate(like) for like in likes]
