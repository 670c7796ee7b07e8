"""安全工具：密码哈希与 JWT 令牌

访问令牌与刷新令牌使用不同的密钥和 audience 签名，服务端不保存会话状态。
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from jwt.exceptions import InvalidTokenError
from pwdlib import PasswordHash
from pwdlib.exceptions import PwdlibError
from pwdlib.hashers.argon2 import Argon2Hasher
from pydantic import BaseModel, ConfigDict

from chirper.config import (
    ACCESS_TOKEN_AUDIENCE,
    REFRESH_TOKEN_AUDIENCE,
    TOKEN_ISSUER,
    get_settings,
)
from chirper.core.exceptions import HashingError

settings = get_settings()

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "

# Argon2id：64 MB 内存，3 轮，单线程
password_hash = PasswordHash(
    (Argon2Hasher(memory_cost=64 * 1024, time_cost=3, parallelism=1),)
)


class TokenPayload(BaseModel):
    """访问令牌声明"""

    model_config = ConfigDict(frozen=True)

    profile_id: UUID
    username: str
    email: str


class RefreshTokenPayload(BaseModel):
    """刷新令牌声明"""

    model_config = ConfigDict(frozen=True)

    profile_id: UUID


def hash_password(password: str) -> str:
    """密码哈希"""
    try:
        return password_hash.hash(password)
    except Exception as exc:
        raise HashingError("Password hashing failed") from exc


def verify_password(hashed_password: str, plain_password: str) -> bool:
    """验证密码，任何校验错误（含哈希格式错误）都返回 False"""
    try:
        return password_hash.verify(plain_password, hashed_password)
    except (PwdlibError, ValueError, TypeError):
        return False


def _encode(
    claims: dict,
    secret: str,
    audience: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        **claims,
        "iss": TOKEN_ISSUER,
        "aud": audience,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def _decode(token: str, secret: str, audience: str) -> dict:
    return jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        audience=audience,
        issuer=TOKEN_ISSUER,
        options={"require": ["exp", "iss", "aud"]},
    )


def create_access_token(
    payload: TokenPayload,
    expires_delta: timedelta | None = None,
) -> str:
    """签发访问令牌（默认 7 天）"""
    return _encode(
        {
            "profile_id": str(payload.profile_id),
            "username": payload.username,
            "email": payload.email,
        },
        settings.jwt_secret.get_secret_value(),
        ACCESS_TOKEN_AUDIENCE,
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(
    payload: RefreshTokenPayload,
    expires_delta: timedelta | None = None,
) -> str:
    """签发刷新令牌（默认 30 天）"""
    return _encode(
        {"profile_id": str(payload.profile_id)},
        settings.jwt_refresh_secret.get_secret_value(),
        REFRESH_TOKEN_AUDIENCE,
        expires_delta or timedelta(days=settings.refresh_token_expire_days),
    )


def verify_access_token(token: str) -> TokenPayload | None:
    """校验访问令牌

    签名错误、过期、issuer/audience 不符都统一返回 None，不向调用方区分原因。
    """
    try:
        claims = _decode(token, settings.jwt_secret.get_secret_value(), ACCESS_TOKEN_AUDIENCE)
        return TokenPayload.model_validate(claims)
    except (InvalidTokenError, ValueError, TypeError):
        return None


def verify_refresh_token(token: str) -> RefreshTokenPayload | None:
    """校验刷新令牌，无效则返回 None"""
    try:
        claims = _decode(
            token, settings.jwt_refresh_secret.get_secret_value(), REFRESH_TOKEN_AUDIENCE
        )
        return RefreshTokenPayload.model_validate(claims)
    except (InvalidTokenError, ValueError, TypeError):
        return None


def extract_bearer_token(header: str | None) -> str | None:
    """解析 `Authorization: Bearer <token>`，缺失或格式错误返回 None"""
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None
