"""认证模块 - Schema"""

from pydantic import EmailStr, Field

from chirper.modules.profile.schemas import USERNAME_PATTERN, ProfileResponse
from chirper.schemas.response import BaseSchema


class RegisterRequest(BaseSchema):
    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    display_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    bio: str = Field(default="", max_length=500)


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseSchema):
    refresh_token: str = Field(min_length=1)


class AuthResponse(BaseSchema):
    """注册/登录结果：令牌对 + 本人资料"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    profile: ProfileResponse


class RefreshResponse(BaseSchema):
    access_token: str
    token_type: str = "bearer"
