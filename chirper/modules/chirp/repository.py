"""Chirp 模块 - 数据访问层"""

from uuid import UUID

from sqlalchemy import Row, Select, delete, exists, func, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chirper.core.database import utc_now
from chirper.modules.like.models import Like
from chirper.modules.profile.models import Profile
from .models import Chirp

FeedRow = Row[tuple[Chirp, Profile, int, bool]]


def feed_statement(viewer_id: UUID | None) -> Select:
    """信息流查询：chirp + 作者 + 点赞数 + 当前用户是否已赞"""
    like_counts = (
        select(Like.chirp_id, func.count(Like.id).label("like_count"))
        .group_by(Like.chirp_id)
        .subquery()
    )
    if viewer_id is not None:
        is_liked = exists().where(Like.chirp_id == Chirp.id, Like.profile_id == viewer_id)
    else:
        is_liked = literal(False)

    return (
        select(
            Chirp,
            Profile,
            func.coalesce(like_counts.c.like_count, 0).label("like_count"),
            is_liked.label("is_liked"),
        )
        .join(Profile, Profile.id == Chirp.profile_id)
        .outerjoin(like_counts, like_counts.c.chirp_id == Chirp.id)
        .execution_options(populate_existing=True)
    )


class ChirpRepository:
    """Chirp 数据访问层

    修改与删除都在 SQL 层带上 profile_id 条件，不单独查归属。
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, chirp: Chirp) -> Chirp:
        self.db.add(chirp)
        await self.db.flush()
        await self.db.refresh(chirp)
        return chirp

    async def exists(self, chirp_id: UUID) -> bool:
        return bool(await self.db.scalar(select(exists().where(Chirp.id == chirp_id))))

    async def get_feed_item(self, chirp_id: UUID, viewer_id: UUID | None) -> FeedRow | None:
        result = await self.db.execute(feed_statement(viewer_id).where(Chirp.id == chirp_id))
        return result.first()

    async def list_feed(
        self,
        viewer_id: UUID | None,
        limit: int = 20,
        offset: int = 0,
        profile_id: UUID | None = None,
    ) -> list[FeedRow]:
        """按时间倒序分页；同一时间戳按 id 倒序保证稳定"""
        stmt = feed_statement(viewer_id)
        if profile_id is not None:
            stmt = stmt.where(Chirp.profile_id == profile_id)
        stmt = stmt.order_by(Chirp.created_at.desc(), Chirp.id.desc()).limit(limit).offset(offset)
        result = await self.db.execute(stmt)
        return list(result.all())

    async def update_owned(self, chirp_id: UUID, owner_id: UUID, content: str) -> UUID | None:
        """WHERE id = ? AND profile_id = ?；不存在或非本人都返回 None"""
        result = await self.db.execute(
            update(Chirp)
            .where(Chirp.id == chirp_id, Chirp.profile_id == owner_id)
            .values(content=content, updated_at=utc_now())
            .returning(Chirp.id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def delete_owned(self, chirp_id: UUID, owner_id: UUID) -> bool:
        result = await self.db.execute(
            delete(Chirp)
            .where(Chirp.id == chirp_id, Chirp.profile_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

