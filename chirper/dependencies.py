"""全局共享依赖：数据库会话、鉴权、请求体类型"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chirper.core.database import get_db
from chirper.core.exceptions import (
    TokenInvalidError,
    TokenMissingError,
    UnsupportedMediaTypeError,
)
from chirper.core.security import TokenPayload, extract_bearer_token, verify_access_token

# 数据库会话依赖（自动管理事务）
DBSession = Annotated[AsyncSession, Depends(get_db)]


def require_auth(request: Request) -> TokenPayload:
    """必须登录：无令牌与令牌无效返回不同的 401 信息"""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        raise TokenMissingError()

    payload = verify_access_token(token)
    if payload is None:
        raise TokenInvalidError()

    request.state.profile = payload
    return payload


def optional_auth(request: Request) -> TokenPayload | None:
    """可选登录：令牌缺失或无效都按匿名处理"""
    token = extract_bearer_token(request.headers.get("Authorization"))
    payload = verify_access_token(token) if token else None
    request.state.profile = payload
    return payload


def require_json(request: Request) -> None:
    """带请求体的写操作只接受 application/json"""
    content_type = request.headers.get("Content-Type")
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type != "application/json":
        raise UnsupportedMediaTypeError(content_type)


CurrentProfile = Annotated[TokenPayload, Depends(require_auth)]
OptionalProfile = Annotated[TokenPayload | None, Depends(optional_auth)]
