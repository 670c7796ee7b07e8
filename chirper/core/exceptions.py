"""业务异常定义"""

from chirper.core.error_codes import ErrorCode


class HashingError(Exception):
    """密码哈希失败"""


class ApiError(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        status_code: int = 400,
        detail: dict | None = None,
    ) -> None:
        self.code = code
        self.message = message or code.name.replace("_", " ").title()
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)


class NotFoundError(ApiError):
    """资源不存在（也用于"不属于你"的资源）"""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        message: str = "Resource not found",
        detail: dict | None = None,
    ) -> None:
        super().__init__(code, message, status_code=404, detail=detail)


class ConflictError(ApiError):
    """资源冲突"""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.DUPLICATE_ENTRY,
        message: str = "Resource conflict",
        detail: dict | None = None,
    ) -> None:
        super().__init__(code, message, status_code=409, detail=detail)


class UnauthorizedError(ApiError):
    """认证失败"""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNAUTHORIZED,
        message: str = "Unauthorized",
        detail: dict | None = None,
    ) -> None:
        super().__init__(code, message, status_code=401, detail=detail)


class TokenMissingError(UnauthorizedError):
    """未携带令牌"""

    def __init__(self) -> None:
        super().__init__(ErrorCode.TOKEN_MISSING, "No token provided")


class TokenInvalidError(UnauthorizedError):
    """令牌无效或已过期"""

    def __init__(self) -> None:
        super().__init__(ErrorCode.TOKEN_INVALID, "Token is invalid or expired")


class InvalidCredentialsError(UnauthorizedError):
    """凭证无效"""

    def __init__(self) -> None:
        super().__init__(ErrorCode.INVALID_CREDENTIALS, "Email or password is incorrect")


class RefreshTokenInvalidError(UnauthorizedError):
    def __init__(self, message: str = "Refresh token is invalid or expired") -> None:
        super().__init__(ErrorCode.REFRESH_TOKEN_INVALID, message)


class UnsupportedMediaTypeError(ApiError):
    """请求体必须是 JSON"""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(
            ErrorCode.UNSUPPORTED_MEDIA_TYPE,
            "Content-Type must be application/json",
            status_code=415,
            detail={"content_type": content_type},
        )
