"""Chirp 模块 - 异常"""

from uuid import UUID

from chirper.core.error_codes import ErrorCode
from chirper.core.exceptions import NotFoundError


class ChirpNotFoundError(NotFoundError):
    """Chirp 不存在，或不属于当前用户（两者刻意不区分）"""

    def __init__(self, chirp_id: UUID, message: str = "The requested chirp does not exist") -> None:
        super().__init__(
            code=ErrorCode.CHIRP_NOT_FOUND,
            message=message,
            detail={"chirp_id": str(chirp_id)},
        )
