"""业务错误码"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """错误码：前三位对应 HTTP 状态码"""

    # 400
    INVALID_REQUEST = 40000
    INVALID_PARAMETER = 40001

    # 401
    UNAUTHORIZED = 40100
    TOKEN_MISSING = 40101
    TOKEN_INVALID = 40102
    INVALID_CREDENTIALS = 40103
    REFRESH_TOKEN_INVALID = 40104

    # 403
    FORBIDDEN = 40300

    # 404
    RESOURCE_NOT_FOUND = 40400
    PROFILE_NOT_FOUND = 40401
    CHIRP_NOT_FOUND = 40402

    # 409
    DUPLICATE_ENTRY = 40900
    USERNAME_ALREADY_EXISTS = 40901
    EMAIL_ALREADY_EXISTS = 40902

    # 415
    UNSUPPORTED_MEDIA_TYPE = 41500

    # 5xx
    SYSTEM_ERROR = 50000
    SERVICE_UNAVAILABLE = 50300
