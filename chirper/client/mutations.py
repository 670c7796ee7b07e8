"""写操作与乐观更新

点赞/取消点赞的流程：
1. 取消该 chirp 点赞统计的在途请求
2. 立即改写点赞统计和所有包含该 chirp 的信息流条目
3. 调用 API；失败时对两处缓存做完全相反的改写
4. 无论成败都让点赞统计失效并重新拉取，纠正两份副本之间的偏差
"""

import asyncio
from typing import Any
from uuid import UUID

from loguru import logger

from chirper.client.api import ApiClient
from chirper.client.cache import QueryCache
from chirper.client.queries import (
    CHIRPS_KEY,
    CURRENT_USER_KEY,
    LIKES_KEY,
    PROFILES_KEY,
    FeedPage,
    chirp_key,
    like_stats_key,
)
from chirper.modules.chirp.schemas import ChirpFeedItem
from chirper.modules.like.schemas import LikeResult, LikeStats
from chirper.modules.profile.schemas import ProfileResponse


def _adjust(like_count: int, liked: bool) -> dict[str, Any]:
    delta = 1 if liked else -1
    return {"like_count": max(0, like_count + delta), "is_liked": liked}


def apply_like_to_stats(stats: LikeStats, liked: bool) -> LikeStats:
    return stats.model_copy(update=_adjust(stats.like_count, liked))


def apply_like_to_chirps(data: Any, chirp_id: str, liked: bool) -> Any:
    """改写 ("chirps", ...) 下的缓存值：信息流页或单条 chirp"""

    def update(item: ChirpFeedItem) -> ChirpFeedItem:
        if str(item.id) != chirp_id:
            return item
        return item.model_copy(update=_adjust(item.like_count, liked))

    if isinstance(data, FeedPage):
        return data.model_copy(update={"chirps": [update(item) for item in data.chirps]})
    if isinstance(data, ChirpFeedItem):
        return update(data)
    return data


class LikeMutations:
    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self.api = api
        self.cache = cache

    def _apply(self, chirp_id: str, liked: bool) -> None:
        self.cache.set_queries_data(
            like_stats_key(chirp_id),
            lambda stats: apply_like_to_stats(stats, liked),
            exact=True,
        )
        self.cache.set_queries_data(CHIRPS_KEY, lambda data: apply_like_to_chirps(data, chirp_id, liked))

    async def _mutate(self, chirp_id: UUID | str, liked: bool) -> LikeResult:
        chirp_id = str(chirp_id)
        stats_key = like_stats_key(chirp_id)

        await self.cache.cancel_queries(stats_key, exact=True)
        self._apply(chirp_id, liked)
        try:
            if liked:
                result = await self.api.like_chirp(chirp_id)
            else:
                result = await self.api.unlike_chirp(chirp_id)
            return LikeResult.model_validate(result)
        except (Exception, asyncio.CancelledError):
            # 被取消同样视为未成功
            self._apply(chirp_id, not liked)
            logger.exception("{} chirp {} failed", "Like" if liked else "Unlike", chirp_id)
            raise
        finally:
            await self.cache.invalidate_queries(stats_key, exact=True)

    async def like(self, chirp_id: UUID | str) -> LikeResult:
        return await self._mutate(chirp_id, liked=True)

    async def unlike(self, chirp_id: UUID | str) -> LikeResult:
        return await self._mutate(chirp_id, liked=False)

    async def toggle(self, chirp_id: UUID | str, is_currently_liked: bool) -> LikeResult:
        """由调用方记录当前状态，决定点赞还是取消"""
        if is_currently_liked:
            return await self.unlike(chirp_id)
        return await self.like(chirp_id)


class ChirpMutations:
    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self.api = api
        self.cache = cache

    async def create(self, content: str) -> ChirpFeedItem:
        chirp = ChirpFeedItem.model_validate(await self.api.create_chirp(content))
        await self.cache.invalidate_queries(CHIRPS_KEY)
        return chirp

    async def update(self, chirp_id: UUID | str, content: str) -> ChirpFeedItem:
        chirp = ChirpFeedItem.model_validate(await self.api.update_chirp(chirp_id, content))
        self.cache.set_query_data(chirp_key(chirp_id), chirp)
        await self.cache.invalidate_queries(CHIRPS_KEY)
        return chirp

    async def delete(self, chirp_id: UUID | str) -> None:
        await self.api.delete_chirp(chirp_id)
        self.cache.remove_queries(chirp_key(chirp_id), exact=True)
        self.cache.remove_queries(like_stats_key(chirp_id), exact=True)
        await self.cache.invalidate_queries(CHIRPS_KEY)


class ProfileMutations:
    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self.api = api
        self.cache = cache

    async def update(self, **updates: Any) -> ProfileResponse:
        profile = ProfileResponse.model_validate(await self.api.update_profile(**updates))
        self.cache.set_query_data(CURRENT_USER_KEY, profile)
        # 作者信息嵌在每条 chirp 里
        await self.cache.invalidate_queries(PROFILES_KEY)
        await self.cache.invalidate_queries(CHIRPS_KEY)
        return profile


class AuthMutations:
    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self.api = api
        self.cache = cache

    async def _mark_viewer_data_stale(self) -> None:
        """is_liked 随登录用户变化，下次读取时重新拉取"""
        await self.cache.invalidate_queries(CHIRPS_KEY, refetch=False)
        await self.cache.invalidate_queries(LIKES_KEY, refetch=False)

    async def login(self, email: str, password: str) -> ProfileResponse:
        data = await self.api.login(email, password)
        profile = ProfileResponse.model_validate(data["profile"])
        self.cache.set_query_data(CURRENT_USER_KEY, profile)
        await self._mark_viewer_data_stale()
        return profile

    async def register(
        self,
        username: str,
        display_name: str,
        email: str,
        password: str,
        bio: str = "",
    ) -> ProfileResponse:
        data = await self.api.register(username, display_name, email, password, bio)
        profile = ProfileResponse.model_validate(data["profile"])
        self.cache.set_query_data(CURRENT_USER_KEY, profile)
        await self._mark_viewer_data_stale()
        return profile

    def logout(self) -> None:
        """清空令牌和全部缓存"""
        self.api.logout()
        self.cache.clear()
