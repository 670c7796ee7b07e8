import asyncio
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from chirper.client.cache import QueryCache
from chirper.client.errors import ApiRequestError
from chirper.client.mutations import AuthMutations, ChirpMutations, LikeMutations
from chirper.client.queries import (
    CURRENT_USER_KEY,
    ChirperQueries,
    FeedPage,
    chirp_key,
    feed_key,
    like_stats_key,
)
from chirper.modules.chirp.schemas import ChirpFeedItem
from chirper.modules.like.schemas import LikeStats

AUTHOR = {
    "id": str(uuid4()),
    "username": "alice_dev",
    "display_name": "Alice",
    "avatar_url": "",
}


def _chirp(like_count: int = 5, is_liked: bool = False) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    return {
        "id": str(uuid4()),
        "profile_id": AUTHOR["id"],
        "content": "hello",
        "created_at": now,
        "updated_at": now,
        "profile": AUTHOR,
        "like_count": like_count,
        "is_liked": is_liked,
    }


class FakeApi:
    """内存版 ApiClient：只实现用到的方法"""

    def __init__(self, chirps: list[dict], server_like_count: int = 5) -> None:
        self.chirps = chirps
        self.server_like_count = server_like_count
        self.fail_with: Exception | None = None
        self.during_call = None
        self.hang: asyncio.Event | None = None
        self.like_calls = 0
        self.is_authenticated = True

    async def get_chirps(self, limit: int = 20, offset: int = 0) -> dict:
        page = self.chirps[offset : offset + limit]
        return {"chirps": page, "pagination": {"limit": limit, "offset": offset, "count": len(page)}}

    async def get_chirp_likes(self, chirp_id) -> dict:
        return {"chirp_id": str(chirp_id), "like_count": self.server_like_count, "is_liked": False}

    async def _like_call(self, liked: bool) -> dict:
        self.like_calls += 1
        if self.during_call:
            self.during_call()
        if self.hang:
            await self.hang.wait()
        await asyncio.sleep(0)
        if self.fail_with:
            raise self.fail_with
        self.server_like_count += 1 if liked else -1
        return {"like_count": self.server_like_count, "is_liked": liked}

    async def like_chirp(self, chirp_id) -> dict:
        return await self._like_call(True)

    async def unlike_chirp(self, chirp_id) -> dict:
        return await self._like_call(False)

    async def create_chirp(self, content: str) -> dict:
        chirp = _chirp(0)
        chirp["content"] = content
        self.chirps.insert(0, chirp)
        return chirp

    async def login(self, email: str, password: str) -> dict:
        return {
            "access_token": "a",
            "refresh_token": "r",
            "profile": {
                **AUTHOR,
                "bio": "",
                "email": email,
                "created_at": "2026-01-01T00:00:00Z",
                "updated_at": "2026-01-01T00:00:00Z",
            },
        }

    def logout(self) -> None:
        self.is_authenticated = False


def _seed(cache: QueryCache, chirp: dict, like_count: int = 5, is_liked: bool = False) -> None:
    cache.set_query_data(
        like_stats_key(chirp["id"]),
        LikeStats(chirp_id=chirp["id"], like_count=like_count, is_liked=is_liked),
    )
    cache.set_query_data(
        feed_key(),
        FeedPage.model_validate(
            {"chirps": [chirp, _chirp(1)], "pagination": {"limit": 20, "offset": 0, "count": 2}}
        ),
    )
    cache.set_query_data(chirp_key(chirp["id"]), ChirpFeedItem.model_validate(chirp))


def _snapshot(cache: QueryCache, chirp_id: str) -> list[tuple[int, bool]]:
    stats = cache.get_query_data(like_stats_key(chirp_id))
    item = next(c for c in cache.get_query_data(feed_key()).chirps if str(c.id) == chirp_id)
    single = cache.get_query_data(chirp_key(chirp_id))
    return [
        (stats.like_count, stats.is_liked),
        (item.like_count, item.is_liked),
        (single.like_count, single.is_liked),
    ]


@pytest.mark.asyncio
async def test_optimistic_like_is_visible_before_server_responds():
    chirp = _chirp()
    api = FakeApi([chirp])
    cache = QueryCache()
    _seed(cache, chirp)
    seen = []
    api.during_call = lambda: seen.extend(_snapshot(cache, chirp["id"]))

    result = await LikeMutations(api, cache).like(chirp["id"])

    assert seen == [(6, True)] * 3
    assert result.like_count == 6
    assert result.is_liked is True


@pytest.mark.asyncio
async def test_failed_like_rolls_back_both_cache_locations():
    chirp = _chirp()
    api = FakeApi([chirp])
    api.fail_with = ApiRequestError(500, "Internal Server Error")
    cache = QueryCache()
    _seed(cache, chirp)

    with pytest.raises(ApiRequestError):
        await LikeMutations(api, cache).like(chirp["id"])

    assert _snapshot(cache, chirp["id"]) == [(5, False)] * 3


@pytest.mark.asyncio
async def test_failed_unlike_rolls_back():
    chirp = _chirp(like_count=3, is_liked=True)
    api = FakeApi([chirp])
    api.fail_with = ApiRequestError(503, "Service Unavailable")
    cache = QueryCache()
    _seed(cache, chirp, like_count=3, is_liked=True)

    with pytest.raises(ApiRequestError):
        await LikeMutations(api, cache).unlike(chirp["id"])

    assert _snapshot(cache, chirp["id"]) == [(3, True)] * 3


@pytest.mark.asyncio
async def test_cancelled_like_rolls_back_both_cache_locations():
    chirp = _chirp()
    api = FakeApi([chirp])
    api.hang = asyncio.Event()
    cache = QueryCache()
    _seed(cache, chirp)

    task = asyncio.create_task(LikeMutations(api, cache).like(chirp["id"]))
    while api.like_calls == 0:
        await asyncio.sleep(0)
    assert _snapshot(cache, chirp["id"]) == [(6, True)] * 3

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert _snapshot(cache, chirp["id"]) == [(5, False)] * 3
    assert api.server_like_count == 5


@pytest.mark.asyncio
async def test_unlike_never_goes_below_zero():
    chirp = _chirp(like_count=0)
    api = FakeApi([chirp], server_like_count=1)
    cache = QueryCache()
    _seed(cache, chirp, like_count=0)
    seen = []
    api.during_call = lambda: seen.extend(_snapshot(cache, chirp["id"]))

    await LikeMutations(api, cache).unlike(chirp["id"])

    assert seen == [(0, False)] * 3


@pytest.mark.asyncio
async def test_settlement_refetches_like_stats():
    chirp = _chirp()
    api = FakeApi([chirp], server_like_count=9)
    cache = QueryCache()
    queries = ChirperQueries(api, cache)
    await queries.like_stats(chirp["id"])
    assert cache.get_query_data(like_stats_key(chirp["id"])).like_count == 9

    # 请求期间别的用户点了赞；失败回滚后以重新拉取的服务端数据为准
    api.fail_with = ApiRequestError(500, "Internal Server Error")
    api.during_call = lambda: setattr(api, "server_like_count", 12)
    with pytest.raises(ApiRequestError):
        await LikeMutations(api, cache).like(chirp["id"])

    stats = cache.get_query_data(like_stats_key(chirp["id"]))
    assert (stats.like_count, stats.is_liked) == (12, False)


@pytest.mark.asyncio
async def test_successful_like_reconciles_with_server_count():
    chirp = _chirp()
    api = FakeApi([chirp], server_like_count=20)
    cache = QueryCache()
    queries = ChirperQueries(api, cache)
    await queries.like_stats(chirp["id"])

    await LikeMutations(api, cache).like(chirp["id"])

    stats = cache.get_query_data(like_stats_key(chirp["id"]))
    assert stats.like_count == 21
    assert not cache.is_stale(like_stats_key(chirp["id"]))


@pytest.mark.asyncio
async def test_toggle_picks_operation_from_current_state():
    chirp = _chirp()
    api = FakeApi([chirp], server_like_count=5)
    cache = QueryCache()
    mutations = LikeMutations(api, cache)

    liked = await mutations.toggle(chirp["id"], is_currently_liked=False)
    unliked = await mutations.toggle(chirp["id"], is_currently_liked=True)

    assert (liked.like_count, liked.is_liked) == (6, True)
    assert (unliked.like_count, unliked.is_liked) == (5, False)


@pytest.mark.asyncio
async def test_create_chirp_refetches_feed():
    api = FakeApi([_chirp()])
    cache = QueryCache()
    queries = ChirperQueries(api, cache)
    await queries.feed()

    await ChirpMutations(api, cache).create("brand new")

    page = cache.get_query_data(feed_key())
    assert [c.content for c in page.chirps][0] == "brand new"
    assert len(page.chirps) == 2


@pytest.mark.asyncio
async def test_login_sets_current_user_and_logout_clears_cache():
    api = FakeApi([_chirp()])
    cache = QueryCache()
    await ChirperQueries(api, cache).feed()
    auth = AuthMutations(api, cache)

    profile = await auth.login("alice@example.com", "pw")

    assert cache.get_query_data(CURRENT_USER_KEY) == profile
    assert cache.is_stale(feed_key())

    auth.logout()
    assert cache.get_query_data(CURRENT_USER_KEY) is None
    assert cache.get_query_data(feed_key()) is None
