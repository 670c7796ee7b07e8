"""认证模块 - 业务逻辑层"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from chirper.core.exceptions import InvalidCredentialsError, RefreshTokenInvalidError
from chirper.core.security import (
    RefreshTokenPayload,
    TokenPayload,
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from chirper.modules.profile.exceptions import (
    EmailAlreadyExistsError,
    UsernameAlreadyExistsError,
    conflict_from_integrity_error,
)
from chirper.modules.profile.models import Profile
from chirper.modules.profile.repository import ProfileRepository
from chirper.modules.profile.schemas import ProfileResponse
from .schemas import AuthResponse, LoginRequest, RefreshRequest, RefreshResponse, RegisterRequest


def _access_token_for(profile: Profile) -> str:
    return create_access_token(
        TokenPayload(profile_id=profile.id, username=profile.username, email=profile.email)
    )


def _issue_tokens(profile: Profile) -> AuthResponse:
    return AuthResponse(
        access_token=_access_token_for(profile),
        refresh_token=create_refresh_token(RefreshTokenPayload(profile_id=profile.id)),
        profile=ProfileResponse.model_validate(profile),
    )


class AuthService:
    def __init__(self, profiles: ProfileRepository) -> None:
        self.profiles = profiles

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """注册：先查重，再由唯一约束兜底并发注册"""
        if await self.profiles.username_exists(data.username):
            raise UsernameAlreadyExistsError(data.username)
        if await self.profiles.email_exists(data.email):
            raise EmailAlreadyExistsError(data.email)

        # Argon2 是 CPU 密集操作，放到线程池
        password_hash = await run_in_threadpool(hash_password, data.password)

        try:
            profile = await self.profiles.create(
                Profile(
                    username=data.username,
                    display_name=data.display_name,
                    email=data.email,
                    bio=data.bio,
                    avatar_url="",
                    password_hash=password_hash,
                )
            )
        except IntegrityError as exc:
            raise conflict_from_integrity_error(exc, data.username, data.email) from exc

        logger.info("Profile registered: {} ({})", profile.username, profile.id)
        return _issue_tokens(profile)

    async def login(self, data: LoginRequest) -> AuthResponse:
        """登录：邮箱不存在与密码错误返回同一个 401"""
        profile = await self.profiles.get_by_email(data.email)
        if profile is None:
            raise InvalidCredentialsError()

        if not await run_in_threadpool(verify_password, profile.password_hash, data.password):
            logger.info("Failed login for {}", profile.id)
            raise InvalidCredentialsError()

        return _issue_tokens(profile)

    async def refresh(self, data: RefreshRequest) -> RefreshResponse:
        """用刷新令牌换新的访问令牌"""
        payload = verify_refresh_token(data.refresh_token)
        if payload is None:
            raise RefreshTokenInvalidError()

        profile = await self.profiles.get_by_id(payload.profile_id)
        if profile is None:
            raise RefreshTokenInvalidError("Associated profile no longer exists")

        return RefreshResponse(access_token=_access_token_for(profile))
