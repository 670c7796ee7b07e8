"""Chirp 模块 - Schema"""

from uuid import UUID

from pydantic import Field

from chirper.modules.profile.schemas import ProfileSummary
from chirper.schemas.datetime_types import UTCDateTime
from chirper.schemas.response import BaseSchema

MAX_CHIRP_LENGTH = 141


class ChirpCreate(BaseSchema):
    content: str = Field(min_length=1, max_length=MAX_CHIRP_LENGTH)


class ChirpUpdate(BaseSchema):
    content: str = Field(min_length=1, max_length=MAX_CHIRP_LENGTH)


class ChirpResponse(BaseSchema):
    """Chirp 基础字段"""

    id: UUID
    profile_id: UUID
    content: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class ChirpFeedItem(ChirpResponse):
    """信息流条目：附带作者、点赞数与当前用户是否已赞"""

    profile: ProfileSummary
    like_count: int = Field(default=0, ge=0)
    is_liked: bool = False
