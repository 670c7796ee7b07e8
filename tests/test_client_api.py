import asyncio
import json

import httpx
import pytest

from chirper.client.api import ApiClient, SessionState
from chirper.client.errors import ApiRequestError
from chirper.client.storage import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, FileTokenStorage, MemoryTokenStorage

BASE_URL = "http://test/api"

ME = {"id": "0192f0c8-0000-7000-8000-000000000001", "username": "alice_dev"}


def _envelope(data, message: str = "success") -> httpx.Response:
    return httpx.Response(200, json={"code": 0, "message": message, "data": data})


def _unauthorized(message: str = "Token is invalid or expired") -> httpx.Response:
    return httpx.Response(
        401,
        json={"code": 40102, "message": message, "data": None, "detail": None},
        headers={"WWW-Authenticate": "Bearer"},
    )


class FakeServer:
    """只认 valid_token；刷新接口按 refresh_ok 决定成功与否"""

    def __init__(self, valid_token: str = "fresh", refresh_ok: bool = True) -> None:
        self.valid_token = valid_token
        self.refresh_ok = refresh_ok
        self.refresh_calls = 0
        self.me_calls = 0
        self.seen_tokens: list[str | None] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        auth = request.headers.get("Authorization")
        if request.url.path == "/api/auth/refresh":
            self.refresh_calls += 1
            assert auth is None
            await asyncio.sleep(0.01)
            if not self.refresh_ok:
                return _unauthorized("Refresh token is invalid or expired")
            return _envelope({"access_token": self.valid_token, "token_type": "bearer"})

        if request.url.path == "/api/auth/login":
            return _unauthorized("Email or password is incorrect")

        if request.url.path == "/api/profiles/me":
            self.me_calls += 1
            self.seen_tokens.append(auth)
            await asyncio.sleep(0)
            if auth == f"Bearer {self.valid_token}":
                return _envelope(ME)
            return _unauthorized()

        return httpx.Response(404, json={"code": 40400, "message": "Not found", "data": None})


def _client(server: FakeServer, storage=None) -> ApiClient:
    if storage is None:
        storage = MemoryTokenStorage({ACCESS_TOKEN_KEY: "stale", REFRESH_TOKEN_KEY: "refresh"})
    return ApiClient(BASE_URL, storage=storage, transport=httpx.MockTransport(server))


@pytest.mark.asyncio
async def test_attaches_bearer_token():
    server = FakeServer(valid_token="stale")
    async with _client(server) as api:
        assert api.state is SessionState.AUTHENTICATED
        assert await api.get_my_profile() == ME
    assert server.seen_tokens == ["Bearer stale"]
    assert server.refresh_calls == 0


@pytest.mark.asyncio
async def test_refreshes_once_and_retries_on_401():
    server = FakeServer()
    storage = MemoryTokenStorage({ACCESS_TOKEN_KEY: "stale", REFRESH_TOKEN_KEY: "refresh"})
    async with _client(server, storage) as api:
        assert await api.get_my_profile() == ME

    assert server.refresh_calls == 1
    assert server.seen_tokens == ["Bearer stale", "Bearer fresh"]
    assert storage.get(ACCESS_TOKEN_KEY) == "fresh"
    assert storage.get(REFRESH_TOKEN_KEY) == "refresh"


@pytest.mark.asyncio
async def test_concurrent_401s_share_a_single_refresh():
    server = FakeServer()
    async with _client(server) as api:
        results = await asyncio.gather(*(api.get_my_profile() for _ in range(5)))

    assert results == [ME] * 5
    assert server.refresh_calls == 1


@pytest.mark.asyncio
async def test_state_is_refreshing_while_refresh_in_flight():
    server = FakeServer()
    async with _client(server) as api:
        task = asyncio.create_task(api.get_my_profile())
        states = set()
        while not task.done():
            states.add(api.state)
            await asyncio.sleep(0.001)
        await task
        assert SessionState.REFRESHING in states
        assert api.state is SessionState.AUTHENTICATED


@pytest.mark.asyncio
async def test_failed_refresh_clears_tokens_and_raises_original_401():
    server = FakeServer(refresh_ok=False)
    storage = MemoryTokenStorage({ACCESS_TOKEN_KEY: "stale", REFRESH_TOKEN_KEY: "refresh"})
    async with _client(server, storage) as api:
        with pytest.raises(ApiRequestError) as exc_info:
            await api.get_my_profile()

        assert api.state is SessionState.ANONYMOUS

    assert exc_info.value.status == 401
    assert exc_info.value.message == "Token is invalid or expired"
    assert server.refresh_calls == 1
    assert storage.get(ACCESS_TOKEN_KEY) is None
    assert storage.get(REFRESH_TOKEN_KEY) is None


@pytest.mark.asyncio
async def test_retry_happens_at_most_once():
    # 刷新成功但新令牌仍被拒绝
    server = FakeServer(valid_token="never-matches")

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/auth/refresh":
            server.refresh_calls += 1
            return _envelope({"access_token": "also-rejected", "token_type": "bearer"})
        return await server(request)

    storage = MemoryTokenStorage({ACCESS_TOKEN_KEY: "stale", REFRESH_TOKEN_KEY: "refresh"})
    async with ApiClient(BASE_URL, storage=storage, transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(ApiRequestError) as exc_info:
            await api.get_my_profile()

    assert exc_info.value.status == 401
    assert server.refresh_calls == 1
    assert server.me_calls == 2


@pytest.mark.asyncio
async def test_unauthenticated_requests_never_refresh():
    server = FakeServer()
    async with _client(server) as api:
        with pytest.raises(ApiRequestError) as exc_info:
            await api.login("alice@example.com", "wrong")

        assert exc_info.value.status == 401
        assert api.refresh_token == "refresh"
    assert server.refresh_calls == 0


@pytest.mark.asyncio
async def test_anonymous_401_without_refresh_token():
    server = FakeServer()
    async with _client(server, MemoryTokenStorage()) as api:
        assert api.state is SessionState.ANONYMOUS
        with pytest.raises(ApiRequestError):
            await api.get_my_profile()
    assert server.refresh_calls == 0
    assert server.seen_tokens == [None]


@pytest.mark.asyncio
async def test_login_persists_tokens_to_file(tmp_path):
    async def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content) == {"email": "alice@example.com", "password": "pw"}
        assert request.headers["Content-Type"] == "application/json"
        return _envelope(
            {"access_token": "a1", "refresh_token": "r1", "token_type": "bearer", "profile": ME},
            message="Login successful",
        )

    storage = FileTokenStorage(tmp_path / "tokens.json")
    async with ApiClient(BASE_URL, storage=storage, transport=httpx.MockTransport(handler)) as api:
        data = await api.login("alice@example.com", "pw")
        assert data["profile"] == ME

    assert json.loads((tmp_path / "tokens.json").read_text()) == {
        "access_token": "a1",
        "refresh_token": "r1",
    }
    reloaded = ApiClient(BASE_URL, storage=FileTokenStorage(tmp_path / "tokens.json"))
    assert reloaded.access_token == "a1"
    reloaded.logout()
    assert json.loads((tmp_path / "tokens.json").read_text()) == {}
    await reloaded.aclose()
