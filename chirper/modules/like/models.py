"""点赞模块 - ORM 模型"""

from uuid import UUID

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chirper.core.database import Base


class Like(Base):
    """点赞：每个 (profile, chirp) 至多一条，切换而不是重复插入"""

    __tablename__ = "chirp_like"

    profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("profile.id", ondelete="CASCADE"),
        index=True,
    )
    chirp_id: Mapped[UUID] = mapped_column(
        ForeignKey("chirp.id", ondelete="CASCADE"),
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("profile_id", "chirp_id", name="uq_chirp_like_profile_chirp"),
    )
