"""API 网关

负责附加 Bearer 令牌、持久化令牌对，以及在 401 时做单飞（single-flight）刷新：
并发收到 401 的请求只会触发一次 /auth/refresh，其余请求等待其结果后重试。
每个失败请求最多刷新一次、重试一次；刷新失败则清空令牌并抛出原始 401。
"""

import asyncio
from enum import StrEnum
from typing import Any
from uuid import UUID

import httpx
from loguru import logger

from chirper.client.errors import ApiRequestError
from chirper.client.storage import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    MemoryTokenStorage,
    TokenStorage,
)

DEFAULT_BASE_URL = "http://localhost:8000/api"


class SessionState(StrEnum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


class ApiClient:
    """Chirper HTTP 客户端"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        storage: TokenStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.storage = storage if storage is not None else MemoryTokenStorage()
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self._refresh_lock = asyncio.Lock()
        self._refreshing = False

        self.access_token: str | None = self.storage.get(ACCESS_TOKEN_KEY)
        self.refresh_token: str | None = self.storage.get(REFRESH_TOKEN_KEY)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # 令牌状态

    @property
    def state(self) -> SessionState:
        if self._refreshing:
            return SessionState.REFRESHING
        if self.access_token:
            return SessionState.AUTHENTICATED
        return SessionState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def save_tokens(self, access_token: str, refresh_token: str) -> None:
        self.storage.set(ACCESS_TOKEN_KEY, access_token)
        self.storage.set(REFRESH_TOKEN_KEY, refresh_token)
        self.access_token = access_token
        self.refresh_token = refresh_token

    def clear_tokens(self) -> None:
        self.storage.remove(ACCESS_TOKEN_KEY)
        self.storage.remove(REFRESH_TOKEN_KEY)
        self.access_token = None
        self.refresh_token = None

    # 请求

    async def _send(
        self,
        method: str,
        path: str,
        *,
        token: str | None,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        return await self._client.request(method, path, json=json, params=params, headers=headers)

    async def _refresh_access_token(self, sent_token: str | None) -> bool:
        """单飞刷新；返回是否拿到了可用于重试的新访问令牌"""
        async with self._refresh_lock:
            # 等锁期间别的请求已经刷新成功
            if self.access_token and self.access_token != sent_token:
                return True
            if not self.refresh_token:
                return False

            self._refreshing = True
            try:
                response = await self._send(
                    "POST",
                    "/auth/refresh",
                    token=None,
                    json={"refresh_token": self.refresh_token},
                )
            except httpx.HTTPError as exc:
                logger.warning("Token refresh failed: {}", exc)
                response = None
            finally:
                self._refreshing = False

            if response is None or response.is_error:
                self.clear_tokens()
                return False

            access_token = response.json()["data"]["access_token"]
            self.storage.set(ACCESS_TOKEN_KEY, access_token)
            self.access_token = access_token
            logger.debug("Access token refreshed")
            return True

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """发送请求并返回响应 JSON；非 2xx 抛出 ApiRequestError

        authenticated=False 的请求（登录、注册、刷新）不带令牌，也不会触发刷新。
        """
        sent_token = self.access_token if authenticated else None
        response = await self._send(method, path, token=sent_token, json=json, params=params)

        if response.status_code == 401 and authenticated and self.refresh_token:
            if await self._refresh_access_token(sent_token):
                response = await self._send(
                    method, path, token=self.access_token, json=json, params=params
                )

        if response.is_error:
            raise self._error(response)
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error(response: httpx.Response) -> ApiRequestError:
        try:
            data = response.json()
        except ValueError:
            data = {"error": "Network error", "message": response.reason_phrase}
        return ApiRequestError(response.status_code, response.reason_phrase, data)

    async def _data(self, method: str, path: str, **kwargs: Any) -> Any:
        body = await self.request(method, path, **kwargs)
        return body["data"] if body else None

    async def _paged(self, path: str, limit: int, offset: int) -> dict[str, Any]:
        body = await self.request("GET", path, params={"limit": limit, "offset": offset})
        return {"chirps": body["data"], "pagination": body["pagination"]}

    # 认证

    async def register(
        self,
        username: str,
        display_name: str,
        email: str,
        password: str,
        bio: str = "",
    ) -> dict[str, Any]:
        data = await self._data(
            "POST",
            "/auth/register",
            json={
                "username": username,
                "display_name": display_name,
                "email": email,
                "password": password,
                "bio": bio,
            },
            authenticated=False,
        )
        self.save_tokens(data["access_token"], data["refresh_token"])
        return data

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self._data(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        self.save_tokens(data["access_token"], data["refresh_token"])
        return data

    def logout(self) -> None:
        """服务端无会话状态，登出只清本地令牌"""
        self.clear_tokens()

    # 资料

    async def get_my_profile(self) -> dict[str, Any]:
        return await self._data("GET", "/profiles/me")

    async def get_profile(self, profile_id: UUID | str) -> dict[str, Any]:
        return await self._data("GET", f"/profiles/{profile_id}")

    async def get_profile_by_username(self, username: str) -> dict[str, Any]:
        return await self._data("GET", f"/profiles/username/{username}")

    async def update_profile(self, **updates: Any) -> dict[str, Any]:
        return await self._data("PUT", "/profiles/me", json=updates)

    # Chirp

    async def get_chirps(self, limit: int = 20, offset: int = 0) -> dict[str, Any]:
        return await self._paged("/chirps", limit, offset)

    async def get_profile_chirps(
        self, profile_id: UUID | str, limit: int = 20, offset: int = 0
    ) -> dict[str, Any]:
        return await self._paged(f"/chirps/profile/{profile_id}", limit, offset)

    async def get_chirp(self, chirp_id: UUID | str) -> dict[str, Any]:
        return await self._data("GET", f"/chirps/{chirp_id}")

    async def create_chirp(self, content: str) -> dict[str, Any]:
        return await self._data("POST", "/chirps", json={"content": content})

    async def update_chirp(self, chirp_id: UUID | str, content: str) -> dict[str, Any]:
        return await self._data("PUT", f"/chirps/{chirp_id}", json={"content": content})

    async def delete_chirp(self, chirp_id: UUID | str) -> None:
        await self.request("DELETE", f"/chirps/{chirp_id}")

    # 点赞

    async def like_chirp(self, chirp_id: UUID | str) -> dict[str, Any]:
        """POST /likes 在服务端是切换语义"""
        return await self._data("POST", "/likes", json={"chirp_id": str(chirp_id)})

    async def unlike_chirp(self, chirp_id: UUID | str) -> dict[str, Any]:
        return await self._data("DELETE", f"/likes/{chirp_id}")

    async def get_chirp_likes(self, chirp_id: UUID | str) -> dict[str, Any]:
        return await self._data("GET", f"/chirps/{chirp_id}/likes")
