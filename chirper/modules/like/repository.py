"""点赞模块 - 数据访问层"""

from uuid import UUID

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Like


class LikeRepository:
    """点赞数据访问层

    并发切换同一 (profile, chirp) 时由唯一约束兜底，后写者为准。
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, profile_id: UUID, chirp_id: UUID) -> bool:
        """插入点赞；已被并发插入时返回 False"""
        try:
            async with self.db.begin_nested():
                self.db.add(Like(profile_id=profile_id, chirp_id=chirp_id))
        except IntegrityError:
            return False
        return True

    async def delete(self, profile_id: UUID, chirp_id: UUID) -> bool:
        result = await self.db.execute(
            delete(Like)
            .where(Like.profile_id == profile_id, Like.chirp_id == chirp_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def toggle(self, profile_id: UUID, chirp_id: UUID) -> bool:
        """无条件翻转，返回翻转后是否为已赞"""
        if await self.delete(profile_id, chirp_id):
            return False
        await self.create(profile_id, chirp_id)
        return True

    async def count(self, chirp_id: UUID) -> int:
        return await self.db.scalar(select(func.count(Like.id)).where(Like.chirp_id == chirp_id)) or 0

    async def is_liked(self, chirp_id: UUID, profile_id: UUID | None) -> bool:
        if profile_id is None:
            return False
        return bool(
            await self.db.scalar(
                select(exists().where(Like.chirp_id == chirp_id, Like.profile_id == profile_id))
            )
        )

    async def list_by_chirp(self, chirp_id: UUID, limit: int = 20, offset: int = 0) -> list[Like]:
        result = await self.db.scalars(
            select(Like)
            .where(Like.chirp_id == chirp_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.all())

    async def list_by_profile(self, profile_id: UUID, limit: int = 20, offset: int = 0) -> list[Like]:
        result = await self.db.scalars(
            select(Like)
            .where(Like.profile_id == profile_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.all())
