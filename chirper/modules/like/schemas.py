"""点赞模块 - Schema"""

from uuid import UUID

from pydantic import Field

from chirper.schemas.datetime_types import UTCDateTime
from chirper.schemas.response import BaseSchema


class LikeToggle(BaseSchema):
    """POST /likes"""

    chirp_id: UUID


class LikeResult(BaseSchema):
    """切换/取消点赞后的结果"""

    like_count: int = Field(ge=0)
    is_liked: bool


class LikeStats(LikeResult):
    chirp_id: UUID


class LikeResponse(BaseSchema):
    id: UUID
    profile_id: UUID
    chirp_id: UUID
    created_at: UTCDateTime
