"""资料模块 - ORM 模型"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chirper.core.database import Base, UpdatedAtMixin


class Profile(UpdatedAtMixin, Base):
    """
    用户资料

    继承自 Base，自动获得：
    - id: UUIDv7 主键
    - created_at 时间戳
    """

    __tablename__ = "profile"

    username: Mapped[str] = mapped_column(String(50), unique=True)
    display_name: Mapped[str] = mapped_column(String(100))
    bio: Mapped[str] = mapped_column(Text, default="")
    avatar_url: Mapped[str] = mapped_column(String(500), default="")
    email: Mapped[str] = mapped_column(String(255), unique=True)
    password_hash: Mapped[str] = mapped_column(String(255))
