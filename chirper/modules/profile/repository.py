"""资料模块 - 数据访问层"""

from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chirper.core.database import utc_now
from .models import Profile


class ProfileRepository:
    """资料数据访问层

    注意：事务由 get_db() 依赖自动管理，Repository 只用 flush/refresh
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, profile_id: UUID) -> Profile | None:
        return await self.db.get(Profile, profile_id)

    async def get_by_username(self, username: str) -> Profile | None:
        return await self.db.scalar(select(Profile).where(Profile.username == username))

    async def get_by_email(self, email: str) -> Profile | None:
        return await self.db.scalar(select(Profile).where(Profile.email == email))

    async def username_exists(self, username: str) -> bool:
        return bool(await self.db.scalar(select(exists().where(Profile.username == username))))

    async def email_exists(self, email: str) -> bool:
        return bool(await self.db.scalar(select(exists().where(Profile.email == email))))

    async def create(self, profile: Profile) -> Profile:
        self.db.add(profile)
        await self.db.flush()
        await self.db.refresh(profile)
        return profile

    async def update(self, profile_id: UUID, values: dict) -> Profile | None:
        """按 id 部分更新，返回更新后的资料；不存在返回 None"""
        if not values:
            return await self.get_by_id(profile_id)
        result = await self.db.execute(
            update(Profile)
            .where(Profile.id == profile_id)
            .values(**values, updated_at=utc_now())
            .returning(Profile.id)
            .execution_options(synchronize_session=False)
        )
        if result.scalar_one_or_none() is None:
            return None
        profile = await self.get_by_id(profile_id)
        if profile is not None:
            await self.db.refresh(profile)
        return profile
