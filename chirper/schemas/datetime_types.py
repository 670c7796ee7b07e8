"""日期时间类型定义"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, PlainSerializer


def ensure_utc_aware(dt: datetime) -> datetime:
    """
    确保 datetime 是 UTC aware

    - naive datetime: 数据库按 UTC 写入，直接补上 UTC 时区
    - aware datetime: 转换为 UTC
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def serialize_to_iso8601z(dt: datetime) -> str:
    """序列化为 ISO8601 UTC 格式（Z 后缀）"""
    utc_dt = ensure_utc_aware(dt)
    return utc_dt.isoformat().replace("+00:00", "Z")


# 统一的 datetime 类型
# - 输入时：统一转换为 UTC
# - 输出时：序列化为 ISO8601 UTC 格式（Z 后缀）
UTCDateTime = Annotated[
    datetime,
    AfterValidator(ensure_utc_aware),
    PlainSerializer(serialize_to_iso8601z),
]
