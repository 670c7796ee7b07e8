"""Chirp 模块 - 业务逻辑层"""

from uuid import UUID

from loguru import logger

from chirper.modules.profile.schemas import ProfileSummary
from .exceptions import ChirpNotFoundError
from .models import Chirp
from .repository import ChirpRepository, FeedRow
from .schemas import ChirpCreate, ChirpFeedItem, ChirpUpdate


def to_feed_item(row: FeedRow) -> ChirpFeedItem:
    chirp, profile, like_count, is_liked = row
    return ChirpFeedItem(
        id=chirp.id,
        profile_id=chirp.profile_id,
        content=chirp.content,
        created_at=chirp.created_at,
        updated_at=chirp.updated_at,
        profile=ProfileSummary.model_validate(profile),
        like_count=int(like_count or 0),
        is_liked=bool(is_liked),
    )


class ChirpService:
    def __init__(self, repository: ChirpRepository) -> None:
        self.repository = repository

    async def feed(
        self,
        viewer_id: UUID | None,
        limit: int,
        offset: int,
        profile_id: UUID | None = None,
    ) -> list[ChirpFeedItem]:
        """信息流（可按作者过滤）"""
        rows = await self.repository.list_feed(viewer_id, limit, offset, profile_id)
        return [to_feed_item(row) for row in rows]

    async def get(self, chirp_id: UUID, viewer_id: UUID | None) -> ChirpFeedItem:
        row = await self.repository.get_feed_item(chirp_id, viewer_id)
        if row is None:
            raise ChirpNotFoundError(chirp_id)
        return to_feed_item(row)

    async def create(self, profile_id: UUID, data: ChirpCreate) -> ChirpFeedItem:
        chirp = await self.repository.create(Chirp(profile_id=profile_id, content=data.content))
        logger.info("Chirp {} created by {}", chirp.id, profile_id)
        return await self.get(chirp.id, profile_id)

    async def update(self, chirp_id: UUID, profile_id: UUID, data: ChirpUpdate) -> ChirpFeedItem:
        """仅作者可改；不存在与非本人一律 404"""
        updated_id = await self.repository.update_owned(chirp_id, profile_id, data.content)
        if updated_id is None:
            raise ChirpNotFoundError(
                chirp_id,
                "The chirp does not exist or you do not have permission to edit it",
            )
        return await self.get(updated_id, profile_id)

    async def delete(self, chirp_id: UUID, profile_id: UUID) -> None:
        deleted = await self.repository.delete_owned(chirp_id, profile_id)
        if not deleted:
            raise ChirpNotFoundError(
                chirp_id,
                "The chirp does not exist or you do not have permission to delete it",
            )
        logger.info("Chirp {} deleted by {}", chirp_id, profile_id)
