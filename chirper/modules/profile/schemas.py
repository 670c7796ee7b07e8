"""资料模块 - Schema"""

from uuid import UUID

from pydantic import AnyHttpUrl, Field, TypeAdapter, field_validator

from chirper.schemas.datetime_types import UTCDateTime
from chirper.schemas.response import BaseSchema

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"

_url_adapter = TypeAdapter(AnyHttpUrl)


def validate_avatar_url(value: str | None) -> str | None:
    """头像地址：合法 URL 或空串"""
    if value is None or value == "":
        return value
    _url_adapter.validate_python(value)
    return value


class ProfileUpdate(BaseSchema):
    """PUT /profiles/me：所有字段可选"""

    username: str | None = Field(
        default=None, min_length=3, max_length=50, pattern=USERNAME_PATTERN
    )
    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: str | None = None

    _check_avatar_url = field_validator("avatar_url")(validate_avatar_url)


class ProfileSummary(BaseSchema):
    """嵌入在 chirp 中的作者信息"""

    id: UUID
    username: str
    display_name: str
    avatar_url: str = ""


class ProfilePublic(ProfileSummary):
    """公开资料（不含邮箱）"""

    bio: str = ""
    created_at: UTCDateTime
    updated_at: UTCDateTime


class ProfileResponse(ProfilePublic):
    """本人资料"""

    email: str
