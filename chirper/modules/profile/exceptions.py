"""资料模块 - 异常"""

from uuid import UUID

from chirper.core.error_codes import ErrorCode
from chirper.core.exceptions import ConflictError, NotFoundError


class ProfileNotFoundError(NotFoundError):
    """资料不存在"""

    def __init__(self, profile_id: UUID | None = None, username: str | None = None) -> None:
        detail = {}
        if profile_id is not None:
            detail["profile_id"] = str(profile_id)
        if username is not None:
            detail["username"] = username
        super().__init__(
            code=ErrorCode.PROFILE_NOT_FOUND,
            message="Profile not found",
            detail=detail or None,
        )


class UsernameAlreadyExistsError(ConflictError):
    """用户名已存在"""

    def __init__(self, username: str) -> None:
        super().__init__(
            code=ErrorCode.USERNAME_ALREADY_EXISTS,
            message="This username is already taken",
            detail={"username": username},
        )


class EmailAlreadyExistsError(ConflictError):
    """邮箱已注册"""

    def __init__(self, email: str) -> None:
        super().__init__(
            code=ErrorCode.EMAIL_ALREADY_EXISTS,
            message="An account with this email already exists",
            detail={"email": email},
        )


def conflict_from_integrity_error(exc: Exception, username: str | None, email: str | None):
    """把唯一约束冲突翻译成对应的 409 异常"""
    text = str(getattr(exc, "orig", exc)).lower()
    if "email" in text and email is not None:
        return EmailAlreadyExistsError(email)
    if username is not None:
        return UsernameAlreadyExistsError(username)
    return ConflictError()
