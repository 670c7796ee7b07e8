"""Chirp 模块 - ORM 模型"""

from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from chirper.core.database import Base, UpdatedAtMixin


class Chirp(UpdatedAtMixin, Base):
    """短帖（1-141 字），只能由作者修改和删除"""

    __tablename__ = "chirp"

    profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("profile.id", ondelete="CASCADE"),
        index=True,
    )
    content: Mapped[str] = mapped_column(String(141))

    __table_args__ = (Index("ix_chirp_created_at_id", "created_at", "id"),)
